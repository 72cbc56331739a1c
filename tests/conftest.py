import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


@pytest.fixture
def samples():
    return pd.DataFrame(
        [
            {'year': 2025, 'lat': 40.0, 'lon': -105.0, 'pct_change': 12.0, 'state': 'Colorado'},
            {'year': 2025, 'lat': 40.0, 'lon': -104.0, 'pct_change': 8.0, 'state': ' colorado '},
            {'year': 2025, 'lat': 41.0, 'lon': -111.0, 'pct_change': -6.5, 'state': 'Utah'},
            {'year': 2026, 'lat': 40.0, 'lon': -105.0, 'pct_change': 14.0, 'state': 'Colorado'},
            {'year': 2026, 'lat': 41.0, 'lon': -111.0, 'pct_change': -9.0, 'state': 'Utah'},
            {'year': 2030, 'lat': 44.0, 'lon': -71.0, 'pct_change': 3.0, 'state': None},
        ]
    )


@pytest.fixture
def resorts():
    return pd.DataFrame(
        [
            {'name': 'Vail', 'state': 'CO', 'lat': 39.64, 'lon': -106.37},
            {'name': 'Park City', 'state': 'UT', 'lat': 40.65, 'lon': -111.51},
        ]
    )


@pytest.fixture
def basemap():
    def square(lon, lat):
        return [[[lon, lat], [lon + 1, lat], [lon + 1, lat + 1], [lon, lat + 1], [lon, lat]]]

    return {
        'type': 'FeatureCollection',
        'features': [
            {'type': 'Feature', 'properties': {'name': 'Colorado'},
             'geometry': {'type': 'Polygon', 'coordinates': square(-106, 39)}},
            {'type': 'Feature', 'properties': {'name': 'Utah'},
             'geometry': {'type': 'Polygon', 'coordinates': square(-112, 40)}},
            {'type': 'Feature', 'properties': {'name': 'Maine'},
             'geometry': {'type': 'Polygon', 'coordinates': square(-70, 45)}},
        ],
    }
