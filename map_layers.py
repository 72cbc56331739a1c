"""
Folium layers for the precipitation map.

Each builder returns a ``folium.FeatureGroup`` for one year. The page keeps
the groups currently on screen in a ``RenderState`` and swaps them as a unit
when the year or render mode changes.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import folium
import pandas as pd
from folium import CircleMarker, Tooltip
from folium.plugins import HeatMap

import config
import year_index


# --- COLOR SCALE ---
def get_color(pct: float) -> str:
    """Diverging step color: blue for wetter, red for drier."""
    for threshold, color in config.COLOR_STEPS:
        if pct > threshold:
            return color
    return config.COLOR_FLOOR


def format_pct(value: Optional[float]) -> str:
    if value is None or pd.isna(value):
        return "n/a"
    return f"{value:.1f}"


# --- REGION VALUES ---
def state_averages(year_samples: pd.DataFrame, region_col: str = config.REGION_COL) -> Dict[str, float]:
    """Mean pct_change per state, keyed by normalized state name."""
    if year_samples.empty or region_col not in year_samples.columns:
        return {}
    return year_index.region_average(
        year_samples, lambda row: year_index.normalize_region_name(row[region_col])
    )


def assign_region_values(features: List[Dict], averages: Dict[str, float],
                         default: float = config.UNMATCHED_REGION_VALUE) -> List[Dict]:
    """Overwrites pct_change on every feature; states without samples get the default."""
    for feature in features:
        props = feature.setdefault("properties", {})
        key = year_index.normalize_region_name(props.get("name"))
        value = averages.get(key, default)
        props["pct_change"] = value
        props["pct_label"] = f"{format_pct(value)}%"
    return features


# --- LAYERS ---
def _state_style(feature):
    return {
        "fillColor": get_color(feature["properties"].get("pct_change", 0)),
        "weight": 1,
        "opacity": 1,
        "color": "white",
        "fillOpacity": 0.8,
    }


def build_state_layer(basemap: Dict, year_samples: pd.DataFrame, year: int) -> folium.FeatureGroup:
    """Choropleth of state averages for one year."""
    assign_region_values(basemap["features"], state_averages(year_samples))

    group = folium.FeatureGroup(name=f"States {year}")
    if not basemap["features"]:
        return group

    folium.GeoJson(
        basemap,
        style_function=_state_style,
        tooltip=folium.GeoJsonTooltip(
            fields=["name", "pct_label"],
            aliases=["State", "Δ Precipitation"],
            sticky=True,
        ),
    ).add_to(group)
    return group


def build_raster_layer(year_samples: pd.DataFrame, year: int, step=None) -> folium.FeatureGroup:
    """One colored rectangle per grid cell."""
    group = folium.FeatureGroup(name=f"Grid {year}")
    if year_samples.empty:
        return group

    lat_step, lon_step = step or year_index.grid_step(year_samples)
    for row in year_samples.itertuples(index=False):
        folium.Rectangle(
            bounds=[
                [row.lat - lat_step / 2, row.lon - lon_step / 2],
                [row.lat + lat_step / 2, row.lon + lon_step / 2],
            ],
            stroke=False,
            fill=True,
            fill_color=get_color(row.pct_change),
            fill_opacity=0.8,
            tooltip=f"{row.lat:.2f}, {row.lon:.2f}<br>Δ Precip: {format_pct(row.pct_change)}%",
        ).add_to(group)
    return group


def density_points(year_samples: pd.DataFrame) -> Dict[str, list]:
    """
    Splits the samples into wetter and drier weighted points.
    Weights are |pct_change| scaled by the largest magnitude of the year.
    """
    points = {"wet": [], "dry": []}
    if year_samples.empty:
        return points

    max_abs = year_samples["pct_change"].abs().max()
    if not max_abs:
        return points

    for row in year_samples.itertuples(index=False):
        if row.pct_change > 0:
            points["wet"].append([row.lat, row.lon, row.pct_change / max_abs])
        elif row.pct_change < 0:
            points["dry"].append([row.lat, row.lon, -row.pct_change / max_abs])
    return points


def build_density_layer(year_samples: pd.DataFrame, year: int) -> folium.FeatureGroup:
    """Smooth density surfaces, wetter in blue and drier in red."""
    group = folium.FeatureGroup(name=f"Density {year}")
    points = density_points(year_samples)

    for key, gradient in (("wet", config.WET_GRADIENT), ("dry", config.DRY_GRADIENT)):
        if points[key]:
            HeatMap(
                points[key],
                radius=config.DENSITY_RADIUS,
                blur=config.DENSITY_BLUR,
                min_opacity=0.3,
                gradient=gradient,
            ).add_to(group)
    return group


def build_resort_layer(resorts: pd.DataFrame, year_samples: pd.DataFrame, year: int) -> folium.FeatureGroup:
    """Resort markers with the nearest grid sample's value in the tooltip."""
    group = folium.FeatureGroup(name=f"Resorts {year}")
    for _, resort in resorts.iterrows():
        best = year_index.nearest(year_samples, (resort["lat"], resort["lon"]))
        pct = format_pct(best["pct_change"] if best is not None else None)

        CircleMarker(
            location=[resort["lat"], resort["lon"]],
            radius=config.RESORT_RADIUS,
            color=config.RESORT_COLOR,
            fill=True,
            fill_color=config.RESORT_COLOR,
            fill_opacity=0.9,
            weight=1,
            tooltip=Tooltip(f"<strong>{resort['name']}</strong><br>{resort['state']}<br>Δ Precip: {pct}%"),
        ).add_to(group)
    return group


def build_layers(mode: str, year: int, year_samples: pd.DataFrame, basemap: Dict,
                 resorts: Optional[pd.DataFrame] = None) -> List[folium.FeatureGroup]:
    if mode == "choropleth":
        layers = [build_state_layer(basemap, year_samples, year)]
    elif mode == "raster":
        layers = [build_raster_layer(year_samples, year)]
    elif mode == "density":
        layers = [build_density_layer(year_samples, year)]
    else:
        raise ValueError(f"Unknown render mode: {mode}")

    if resorts is not None and not resorts.empty:
        layers.append(build_resort_layer(resorts, year_samples, year))
    return layers


# --- BASE MAP ---
def build_base_map() -> folium.Map:
    """Fixed view of the lower 48; panning and zooming are disabled."""
    m = folium.Map(
        location=[config.DEFAULT_LAT, config.DEFAULT_LON],
        zoom_start=config.DEFAULT_ZOOM,
        tiles=config.MAP_TILES,
        zoom_control=False,
        dragging=False,
        scroll_wheel_zoom=False,
        double_click_zoom=False,
        box_zoom=False,
        keyboard=False,
        touch_zoom=False,
    )
    add_legend(m)
    return m


def add_legend(m: folium.Map) -> folium.Map:
    rows = []
    upper = None
    for threshold, color in config.COLOR_STEPS:
        label = f"&gt; {threshold}%" if upper is None else f"{threshold}% to {upper}%"
        rows.append(f"<div><span style='background:{color};width:14px;height:10px;display:inline-block;'></span> {label}</div>")
        upper = threshold
    rows.append(
        f"<div><span style='background:{config.COLOR_FLOOR};width:14px;height:10px;display:inline-block;'></span> "
        f"&le; {upper}%</div>"
    )

    legend_html = f"""
    <div style="position: fixed; bottom: 30px; left: 20px; z-index: 9999;
                background: rgba(255, 255, 255, 0.9); padding: 6px 8px;
                font-family: sans-serif; font-size: 11px; border-radius: 4px;">
        <b>Δ Precipitation</b>
        {''.join(rows)}
    </div>
    """
    m.get_root().html.add_child(folium.Element(legend_html))
    return m


# --- RENDER STATE ---
@dataclass
class RenderState:
    """
    The layers currently on screen and the year/mode they were drawn for.
    The page hands ``layers`` to st_folium as its dynamic feature groups, so
    swapping the list is what takes the previous year off the map.
    """
    year: Optional[int] = None
    mode: Optional[str] = None
    layers: List[folium.FeatureGroup] = field(default_factory=list)

    def replace(self, year: int, mode: str, layers: List[folium.FeatureGroup]) -> List[folium.FeatureGroup]:
        previous = self.clear()
        self.year = year
        self.mode = mode
        self.layers = list(layers)
        return previous

    def clear(self) -> List[folium.FeatureGroup]:
        previous = self.layers
        self.layers = []
        self.year = None
        self.mode = None
        return previous
