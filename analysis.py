"""
Summary statistics and charts for the precipitation projections
"""
from typing import List

import pandas as pd
import plotly.express as px
import streamlit as st

import config
import year_index


# --- SUMMARIES ---
@st.cache_data
def yearly_summary(samples: pd.DataFrame) -> pd.DataFrame:
    """
    Per-year mean, min and max pct_change across the grid.
    Returns: DataFrame with columns year, mean, min, max, samples.
    """
    if samples.empty:
        return pd.DataFrame(columns=["year", "mean", "min", "max", "samples"])

    summary = samples.groupby("year")["pct_change"].agg(["mean", "min", "max", "count"])
    summary = summary.rename(columns={"count": "samples"}).reset_index()
    return summary.sort_values("year").reset_index(drop=True)


@st.cache_data
def state_trend(samples: pd.DataFrame, states: List[str]) -> pd.DataFrame:
    """Mean pct_change per (year, state) for the selected states."""
    columns = ["year", "state", "pct_change"]
    if samples.empty or config.REGION_COL not in samples.columns:
        return pd.DataFrame(columns=columns)

    wanted = {year_index.normalize_region_name(s) for s in states}
    df = samples.assign(state_key=samples[config.REGION_COL].map(year_index.normalize_region_name))
    df = df[df["state_key"].isin(wanted)]
    if df.empty:
        return pd.DataFrame(columns=columns)

    trend = df.groupby(["year", "state_key"])["pct_change"].mean().reset_index()
    trend["state"] = trend["state_key"].str.title()
    return trend[columns]


def resort_timeseries(index: year_index.YearIndex, resort: pd.Series) -> pd.DataFrame:
    """Nearest grid sample's pct_change for a resort in every indexed year."""
    rows = []
    for year in year_index.available_years(index):
        best = year_index.nearest(year_index.samples_for_year(index, year), (resort["lat"], resort["lon"]))
        if best is not None:
            rows.append({"year": year, "pct_change": float(best["pct_change"])})
    return pd.DataFrame(rows, columns=["year", "pct_change"])


def resort_table(resorts: pd.DataFrame, year_samples: pd.DataFrame) -> pd.DataFrame:
    """Resorts with the value of their nearest grid sample for one year."""
    df = resorts[config.RESORT_COLS].copy()
    values = []
    for _, resort in df.iterrows():
        best = year_index.nearest(year_samples, (resort["lat"], resort["lon"]))
        values.append(float(best["pct_change"]) if best is not None else None)
    df["pct_change"] = pd.Series(values, index=df.index, dtype=float)
    return df.sort_values("pct_change", na_position="last").reset_index(drop=True)


# --- VISUALIZATION HELPERS ---
def create_trend_chart(summary: pd.DataFrame):
    """Line chart of the national mean with the min/max range."""
    long_df = summary.melt(id_vars="year", value_vars=["mean", "min", "max"],
                           var_name="Statistic", value_name="pct_change")

    fig = px.line(
        long_df,
        x="year",
        y="pct_change",
        color="Statistic",
        title="Projected Precipitation Change Across the Grid",
        labels={"year": "Year", "pct_change": "Δ Precipitation (%)"},
        color_discrete_map={"mean": "#2171b5", "min": "#de2d26", "max": "#08306b"},
    )
    fig.add_hline(y=0, line_dash="dot", line_color="gray")
    fig.update_layout(height=450)
    return fig


def create_state_trend_chart(trend: pd.DataFrame):
    fig = px.line(
        trend,
        x="year",
        y="pct_change",
        color="state",
        markers=True,
        title="State Averages by Year",
        labels={"year": "Year", "pct_change": "Δ Precipitation (%)", "state": "State"},
    )
    fig.add_hline(y=0, line_dash="dot", line_color="gray")
    fig.update_layout(height=450)
    return fig


def create_resort_chart(series: pd.DataFrame, resort_name: str):
    """Bar chart of a resort's nearest-sample value per year, colored by sign."""
    df = series.assign(Direction=series["pct_change"].map(lambda v: "Wetter" if v > 0 else "Drier"))

    fig = px.bar(
        df,
        x="year",
        y="pct_change",
        color="Direction",
        title=f"Δ Precipitation near {resort_name}",
        labels={"year": "Year", "pct_change": "Δ Precipitation (%)"},
        color_discrete_map={"Wetter": "#2171b5", "Drier": "#de2d26"},
    )
    fig.update_layout(height=400, showlegend=False)
    return fig
