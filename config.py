# Configuration settings for the US Precipitation Change Map
import os

# Data Files
GRID_FILE = os.environ.get("PRECIP_GRID_CSV", "data/us_pr_change_by_year.csv")
RESORTS_FILE = os.environ.get("PRECIP_RESORTS_CSV", "data/resorts.csv")
BASEMAP_URL = os.environ.get(
    "PRECIP_BASEMAP_URL",
    "https://raw.githubusercontent.com/PublicaMundi/MappingAPI/master/data/geojson/us-states.json",
)
# Layer to read from multi-object files such as a TopoJSON atlas ("states")
BASEMAP_LAYER = os.environ.get("PRECIP_BASEMAP_LAYER") or None
REQUEST_TIMEOUT = 30

# Columns
SAMPLE_COLS = ["year", "lat", "lon", "pct_change"]
RESORT_COLS = ["name", "state", "lat", "lon"]
REGION_COL = "state"

# States dropped from the basemap (not part of the contiguous grid)
EXCLUDED_STATES = {"Alaska", "Hawaii", "Puerto Rico"}

# Year Settings
DEFAULT_YEAR = 2025

# Map Settings - fixed view of the lower 48
DEFAULT_LAT = 39.0
DEFAULT_LON = -96.0
DEFAULT_ZOOM = 4
MAP_TILES = "CartoDB positron"
MAP_HEIGHT = 600

# Render Modes
RENDER_MODES = {
    "choropleth": "State averages",
    "raster": "Grid cells",
    "density": "Smooth density",
}
DEFAULT_RENDER_MODE = "choropleth"

# Color scale (blue = wetter, red = drier), checked top to bottom
COLOR_STEPS = [
    (30, "#08306b"),
    (20, "#2171b5"),
    (10, "#6baed6"),
    (0, "#bdd7e7"),
    (-10, "#fcae91"),
    (-20, "#fb6a4a"),
    (-30, "#de2d26"),
]
COLOR_FLOOR = "#a50f15"
UNMATCHED_REGION_VALUE = 0.0

# Density Settings
DENSITY_RADIUS = 25
DENSITY_BLUR = 18
WET_GRADIENT = {0.2: "#bdd7e7", 0.5: "#6baed6", 0.8: "#2171b5", 1.0: "#08306b"}
DRY_GRADIENT = {0.2: "#fcae91", 0.5: "#fb6a4a", 0.8: "#de2d26", 1.0: "#a50f15"}

# Resort Markers
RESORT_COLOR = "#0ea5e9"
RESORT_RADIUS = 4
