"""
Year-indexed access to the precipitation grid samples.

The index is built once from the full table and then only queried: every
slider move looks up one year's partition instead of rescanning the data.
Nearest-sample lookups work in decimal degrees on the ``lat``/``lon`` columns
unless the caller names other columns, in which case the query point must be
expressed in that same space.
"""
from types import MappingProxyType
from typing import Callable, Dict, Hashable, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

import config

YearIndex = Mapping[int, pd.DataFrame]


# --- INDEX CONSTRUCTION ---
def build(samples: pd.DataFrame) -> YearIndex:
    """
    Partitions the samples by exact year value.
    Row order inside each year follows the input; the original row labels are kept.
    """
    partitions = {}
    if samples.empty:
        return MappingProxyType(partitions)

    if samples["year"].isna().any():
        raise ValueError("Samples with a missing year cannot be indexed")

    for year, group in samples.groupby("year", sort=True):
        partitions[_year_key(year)] = group
    return MappingProxyType(partitions)


def _year_key(year):
    # Whole-number years become plain ints; anything else keeps its exact value
    if float(year).is_integer():
        return int(year)
    return float(year)


def samples_for_year(index: YearIndex, year: int) -> pd.DataFrame:
    """Returns the samples for one year, or an empty frame if the year is absent."""
    samples = index.get(year)
    if samples is not None:
        return samples

    # Keep the column layout of the indexed data so callers can still select columns
    columns = next(iter(index.values())).columns if index else config.SAMPLE_COLS
    return pd.DataFrame(columns=columns)


def available_years(index: YearIndex) -> list:
    return sorted(index.keys())


# --- LOOKUPS ---
def nearest(
    samples: pd.DataFrame,
    point: Tuple[float, float],
    x_col: str = "lat",
    y_col: str = "lon",
) -> Optional[pd.Series]:
    """
    Finds the sample closest to ``point`` by squared Euclidean distance.

    ``point`` is ``(x, y)`` in the space of ``x_col``/``y_col``; by default that is
    ``(lat, lon)`` in degrees. Ties go to the first sample in row order.
    Returns None when there are no samples or none has usable coordinates.
    """
    if samples is None or len(samples) == 0:
        return None

    dx = samples[x_col].to_numpy(dtype=float) - float(point[0])
    dy = samples[y_col].to_numpy(dtype=float) - float(point[1])
    dist = dx * dx + dy * dy
    if not np.isfinite(dist).any():
        return None
    dist = np.where(np.isnan(dist), np.inf, dist)

    # argmin returns the first occurrence of the minimum
    return samples.iloc[int(np.argmin(dist))]


def region_average(
    samples: pd.DataFrame,
    region_key: Union[str, Callable[[pd.Series], Hashable]],
) -> Dict[Hashable, float]:
    """
    Mean pct_change per region.

    ``region_key`` is either a column name or a function of one sample row.
    Regions without samples are absent from the result and rows whose key is
    missing are dropped; callers fill in their own default.
    """
    if samples.empty:
        return {}

    if callable(region_key):
        keys = samples.apply(region_key, axis=1)
    else:
        keys = samples[region_key]

    means = samples["pct_change"].astype(float).groupby(keys).mean()
    return {key: float(value) for key, value in means.items()}


def normalize_region_name(name) -> Optional[str]:
    """Lower-cases and trims a region name. Missing names stay None."""
    if name is None or (not isinstance(name, str) and pd.isna(name)):
        return None
    return str(name).strip().lower()


def grid_step(samples: pd.DataFrame, default: float = 1.0) -> Tuple[float, float]:
    """Smallest positive (lat, lon) spacing between distinct grid coordinates."""
    if samples.empty:
        return default, default

    steps = []
    for col in ("lat", "lon"):
        values = np.unique(samples[col].dropna().to_numpy(dtype=float))
        diffs = np.diff(values)
        diffs = diffs[diffs > 0]
        steps.append(float(diffs.min()) if diffs.size else default)
    return steps[0], steps[1]
