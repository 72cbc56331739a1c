"""
Pre-compute the state of every grid cell and add a state column to the grid CSV.
Run this once so the map can draw state averages for grids without one.
"""
import time

import pandas as pd
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

import config

TEMP_FILE = "data/grid_states_temp.csv"

# Initialize geocoder
geolocator = Nominatim(user_agent="us_precip_change_precompute")


def reverse_state(lat, lon, max_retries=3):
    """Reverse-geocode a grid cell to its U.S. state name, or None if it is not in one."""
    for attempt in range(max_retries):
        try:
            location = geolocator.reverse((lat, lon), timeout=10, language="en", zoom=5)
            if location is None:
                return None
            address = location.raw.get("address", {})
            if address.get("country_code") != "us":
                return None
            return address.get("state")
        except (GeocoderTimedOut, GeocoderServiceError):
            if attempt < max_retries - 1:
                time.sleep(1)
    return None


def load_progress(path):
    """
    Loads the cells geocoded by an earlier run.
    Cells saved without a state are left out so they get retried.
    """
    try:
        existing_df = pd.read_csv(path)
    except FileNotFoundError:
        print("No temp file found, starting from scratch.")
        return [], set()

    valid_df = existing_df.dropna(subset=["state"])
    results = valid_df.to_dict("records")
    print(f"Loaded {len(results)} geocoded cells from temp file.")
    return results, set((row["lat"], row["lon"]) for row in results)


def main():
    print("Loading grid data...")
    df = pd.read_csv(config.GRID_FILE)

    cells = df[["lat", "lon"]].drop_duplicates()
    print(f"Found {len(cells)} unique grid cells to geocode")

    results, processed = load_progress(TEMP_FILE)

    total_cells = len(cells)
    for row in cells.itertuples(index=False):
        if pd.isna(row.lat) or pd.isna(row.lon):
            continue
        if (row.lat, row.lon) in processed:
            continue

        print(f"Geocoding {len(results) + 1}/{total_cells}: {row.lat}, {row.lon}...")
        results.append({"lat": row.lat, "lon": row.lon, "state": reverse_state(row.lat, row.lon)})
        time.sleep(1)  # Nominatim usage policy: one request per second

        # Save progress every 20 cells
        if len(results) % 20 == 0:
            pd.DataFrame(results).to_csv(TEMP_FILE, index=False)
            print(f"Progress saved: {len(results)}/{total_cells}")

    states_df = pd.DataFrame(results, columns=["lat", "lon", "state"])
    df = df.drop(columns=[config.REGION_COL], errors="ignore").merge(states_df, on=["lat", "lon"], how="left")
    df.to_csv(config.GRID_FILE, index=False)

    print(f"\nDone! Wrote state column to {config.GRID_FILE}")
    print(f"Cells inside a state: {states_df['state'].notna().sum()}")
    print(f"Cells outside any state: {states_df['state'].isna().sum()}")


if __name__ == "__main__":
    main()
