import streamlit as st
from streamlit_folium import st_folium

import analysis
import config
import data_manager
import map_layers
import year_index

# --- APP CONFIG ---
st.set_page_config(layout="wide")
st.title("CMIP6 U.S. Precipitation Change Heatmap")
st.caption("Simulated change in annual precipitation relative to the historical baseline, by year.")
st.caption("Blue is wetter, red is drier. Ski resorts show the value of the nearest grid cell.")


# --- DATA LOADING ---
data = data_manager.load_data()
if data is None:
    st.stop()

basemap, grid, resorts = data
if grid.empty:
    st.error("No precipitation samples found in the grid data.")
    st.stop()

index = data_manager.load_year_index(grid)
years = year_index.available_years(index)

# --- SIDEBAR ---
st.sidebar.header("🗺️ Map Settings")

render_modes = list(config.RENDER_MODES.keys())
mode = st.sidebar.radio(
    "Render mode",
    render_modes,
    index=render_modes.index(config.DEFAULT_RENDER_MODE),
    format_func=config.RENDER_MODES.get,
)
if mode == "choropleth" and config.REGION_COL not in grid.columns:
    st.sidebar.info("The grid has no state column, so state averages are unavailable. "
                    "Run precompute_states.py to add one. Showing grid cells instead.")
    mode = "raster"

show_resorts = st.sidebar.checkbox("Show ski resorts", value=True)

default_year = config.DEFAULT_YEAR if config.DEFAULT_YEAR in index else years[0]
if len(years) > 1:
    year = st.sidebar.slider("Year", min_value=years[0], max_value=years[-1], value=default_year, step=1)
else:
    year = years[0]
    st.sidebar.write(f"**Year:** {year}")

# --- RENDER STATE ---
if "render_state" not in st.session_state:
    st.session_state["render_state"] = map_layers.RenderState()
render_state = st.session_state["render_state"]

year_samples = year_index.samples_for_year(index, year)

if not year_samples.empty:
    layers = map_layers.build_layers(
        mode, year, year_samples, basemap,
        resorts=resorts if show_resorts else None,
    )
    render_state.replace(year, mode, layers)

# --- TABS LAYOUT ---
tab1, tab2, tab3 = st.tabs(["🗺️ Map", "⛷️ Resorts", "📈 Trends"])

with tab1:
    if year_samples.empty:
        if render_state.year is not None:
            st.warning(f"No data for {year}. Still showing {render_state.year}.")
        else:
            st.warning(f"No data for {year}.")
    else:
        # --- METRICS ROW ---
        wettest = year_samples.loc[year_samples["pct_change"].idxmax()]
        driest = year_samples.loc[year_samples["pct_change"].idxmin()]

        col_m1, col_m2, col_m3 = st.columns(3)
        col_m1.metric("Mean Δ Precipitation", f"{year_samples['pct_change'].mean():.1f}%")
        col_m2.metric("Wettest Cell", f"{wettest['pct_change']:.1f}%",
                      help=f"{wettest['lat']:.2f}, {wettest['lon']:.2f}")
        col_m3.metric("Driest Cell", f"{driest['pct_change']:.1f}%",
                      help=f"{driest['lat']:.2f}, {driest['lon']:.2f}")

    if render_state.year is not None:
        st.subheader(f"{config.RENDER_MODES[render_state.mode]}, {render_state.year}")

    m = map_layers.build_base_map()
    st_folium(
        m,
        key="precip_map",
        feature_group_to_add=render_state.layers,
        height=config.MAP_HEIGHT,
        use_container_width=True,
        returned_objects=[],
    )

with tab2:
    st.subheader(f"Ski Resorts, {year}")

    if resorts.empty:
        st.info("No resorts loaded.")
    else:
        table = analysis.resort_table(resorts, year_samples)
        st.dataframe(table, use_container_width=True)

        csv = table.to_csv(index=False).encode("utf-8")
        st.download_button(
            label="📥 Download Resort Table as CSV",
            data=csv,
            file_name=f"resorts_pr_change_{year}.csv",
            mime="text/csv",
        )

        st.divider()
        resort_name = st.selectbox("Resort", resorts["name"].tolist())
        resort = resorts[resorts["name"] == resort_name].iloc[0]
        series = analysis.resort_timeseries(index, resort)
        if series.empty:
            st.info("No samples near this resort.")
        else:
            st.plotly_chart(analysis.create_resort_chart(series, resort_name), use_container_width=True)

with tab3:
    st.subheader("📈 Trend Analysis")

    summary = analysis.yearly_summary(grid)
    st.plotly_chart(analysis.create_trend_chart(summary), use_container_width=True)

    with st.expander("View Yearly Summary"):
        st.dataframe(summary, use_container_width=True)

    if config.REGION_COL in grid.columns:
        states = sorted(grid[config.REGION_COL].dropna().astype(str).str.strip().unique())
        selected_states = st.multiselect("Select States to Compare", states,
                                         default=states[:3] if len(states) > 3 else states)
        if selected_states:
            trend = analysis.state_trend(grid, selected_states)
            if trend.empty:
                st.info("No samples for the selected states.")
            else:
                st.plotly_chart(analysis.create_state_trend_chart(trend), use_container_width=True)
        else:
            st.info("Select states to see the trend.")
