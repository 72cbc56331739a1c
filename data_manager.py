import json
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from typing import Dict, Optional, Tuple

import geopandas as gpd
import pandas as pd
import requests
import streamlit as st

import config
import year_index


# --- CSV LOADING ---
def clean_grid_samples(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerces the grid columns to numbers and drops rows that do not parse.
    An optional state column is passed through untouched.
    """
    df = df.copy()
    df.columns = df.columns.str.strip()

    missing = set(config.SAMPLE_COLS) - set(df.columns)
    if missing:
        raise ValueError(f"Grid CSV missing columns: {sorted(missing)}")

    for col in config.SAMPLE_COLS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df = df.dropna(subset=config.SAMPLE_COLS)
    df["year"] = df["year"].astype(int)
    return df.reset_index(drop=True)


def clean_resorts(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = df.columns.str.strip()

    missing = set(config.RESORT_COLS) - set(df.columns)
    if missing:
        raise ValueError(f"Resorts CSV missing columns: {sorted(missing)}")

    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lon"] = pd.to_numeric(df["lon"], errors="coerce")
    return df.dropna(subset=["lat", "lon"]).reset_index(drop=True)


def read_grid_samples(path: str) -> pd.DataFrame:
    return clean_grid_samples(pd.read_csv(path))


def read_resorts(path: str) -> pd.DataFrame:
    return clean_resorts(pd.read_csv(path))


# --- BASEMAP ---
def filter_contiguous(states: gpd.GeoDataFrame, excluded=config.EXCLUDED_STATES) -> gpd.GeoDataFrame:
    """Drops the states that fall outside the lower-48 grid."""
    if "name" not in states.columns:
        raise ValueError("Basemap has no 'name' property")
    return states[~states["name"].isin(excluded)].reset_index(drop=True)


def basemap_geojson(states: gpd.GeoDataFrame) -> Dict:
    """Contiguous states as a GeoJSON FeatureCollection in lon/lat, ready for folium."""
    if states.crs is not None and states.crs.to_epsg() != 4326:
        states = states.to_crs(epsg=4326)
    return json.loads(filter_contiguous(states).to_json())


def fetch_basemap(url: str, layer: Optional[str] = config.BASEMAP_LAYER) -> Dict:
    """
    Reads the state polygons from a URL or a local file.
    GeoJSON and TopoJSON are both read through geopandas.
    """
    kwargs = {"layer": layer} if layer else {}
    if url.startswith(("http://", "https://")):
        response = requests.get(url, timeout=config.REQUEST_TIMEOUT)
        response.raise_for_status()
        states = gpd.read_file(BytesIO(response.content), **kwargs)
    else:
        states = gpd.read_file(url, **kwargs)

    return basemap_geojson(states)


# --- STARTUP ---
@st.cache_data
def load_all(basemap_url: str, grid_path: str, resorts_path: str) -> Tuple[Dict, pd.DataFrame, pd.DataFrame]:
    """
    Loads the basemap and both CSVs in parallel and waits for all three.
    Any failure propagates; failed loads are not cached.
    """
    with ThreadPoolExecutor(max_workers=3) as pool:
        basemap_future = pool.submit(fetch_basemap, basemap_url)
        grid_future = pool.submit(read_grid_samples, grid_path)
        resorts_future = pool.submit(read_resorts, resorts_path)
        return basemap_future.result(), grid_future.result(), resorts_future.result()


@st.cache_resource
def load_year_index(grid: pd.DataFrame) -> year_index.YearIndex:
    """Builds the year index once per grid; the index is shared read-only across sessions."""
    return year_index.build(grid)


def load_data(
    basemap_url: str = config.BASEMAP_URL,
    grid_path: str = config.GRID_FILE,
    resorts_path: str = config.RESORTS_FILE,
) -> Optional[Tuple[Dict, pd.DataFrame, pd.DataFrame]]:
    """Startup load for the page. Reports the failure and returns None if anything is missing."""
    try:
        return load_all(basemap_url, grid_path, resorts_path)
    except FileNotFoundError as e:
        st.error(f"File not found: {e.filename or e}")
    except requests.RequestException as e:
        st.error(f"Could not fetch basemap from {basemap_url}: {e}")
    except RuntimeError as e:
        # GDAL read failures (missing or unreadable basemap file)
        st.error(f"Could not read basemap {basemap_url}: {e}")
    except ValueError as e:
        st.error(f"Invalid input data: {e}")
    return None
