import math

import pandas as pd
import pytest

import analysis
import year_index


def test_yearly_summary(samples):
    summary = analysis.yearly_summary(samples)

    assert summary['year'].tolist() == [2025, 2026, 2030]
    first = summary.iloc[0]
    assert first['mean'] == pytest.approx((12.0 + 8.0 - 6.5) / 3)
    assert first['min'] == pytest.approx(-6.5)
    assert first['max'] == pytest.approx(12.0)
    assert summary['samples'].tolist() == [3, 2, 1]


def test_yearly_summary_empty():
    summary = analysis.yearly_summary(pd.DataFrame(columns=['year', 'lat', 'lon', 'pct_change']))

    assert summary.empty
    assert list(summary.columns) == ['year', 'mean', 'min', 'max', 'samples']


def test_state_trend_groups_normalized_states(samples):
    trend = analysis.state_trend(samples, ['Colorado'])

    assert trend['state'].unique().tolist() == ['Colorado']
    assert trend['year'].tolist() == [2025, 2026]
    assert trend['pct_change'].tolist() == [pytest.approx(10.0), pytest.approx(14.0)]


def test_state_trend_without_state_column(samples):
    assert analysis.state_trend(samples.drop(columns=['state']), ['Utah']).empty


def test_resort_timeseries(samples, resorts):
    index = year_index.build(samples)

    series = analysis.resort_timeseries(index, resorts.iloc[1])

    assert series['year'].tolist() == [2025, 2026, 2030]
    # 2030 only has a sample in New England, which is still the nearest one
    assert series['pct_change'].tolist() == [pytest.approx(-6.5), pytest.approx(-9.0), pytest.approx(3.0)]


def test_resort_table_sorted_with_missing_values(samples, resorts):
    index = year_index.build(samples)

    table = analysis.resort_table(resorts, year_index.samples_for_year(index, 2025))
    assert table['name'].tolist() == ['Park City', 'Vail']
    assert table['pct_change'].tolist() == [pytest.approx(-6.5), pytest.approx(12.0)]

    empty = analysis.resort_table(resorts, year_index.samples_for_year(index, 1990))
    assert all(math.isnan(v) for v in empty['pct_change'])


def test_charts_have_expected_traces(samples, resorts):
    summary = analysis.yearly_summary(samples)
    fig = analysis.create_trend_chart(summary)
    assert len(fig.data) == 3

    trend = analysis.state_trend(samples, ['Colorado', 'Utah'])
    assert len(analysis.create_state_trend_chart(trend).data) == 2

    series = analysis.resort_timeseries(year_index.build(samples), resorts.iloc[0])
    fig = analysis.create_resort_chart(series, 'Vail')
    assert fig.layout.title.text == 'Δ Precipitation near Vail'
