
import streamlit as st
import pandas as pd
import folium
from folium.features import GeoJson, GeoJsonTooltip
import branca.colormap as cm
from streamlit_folium import st_folium
from geopandas import GeoDataFrame
from datetime import date
from typing import Optional, Dict, Any, Sequence

from color_bands import ColorBand, band_labels
from config import (
    BAND_COLORS,
    BAND_THRESHOLDS,
    DEFAULT_MAP_LOCATION,
    DEFAULT_ZOOM,
    DIVISION_NAME_PROPERTY,
    FEATURE_STYLE,
    HOVER_STYLE,
    MAX_BOUNDS,
    MAX_ZOOM,
    MIN_ZOOM,
)
from data_loader import division_id_of
from index_store import DivisionIndexStore
from insurers import insurers_for
from premium import format_rate
from seasons import sales_and_payout_windows

# --- Helper Functions ---

def get_legend(thresholds: Sequence[float] = BAND_THRESHOLDS) -> cm.StepColormap:
    """Creates a stepped branca colormap matching the five severity bands."""
    upper = thresholds[-1] + (thresholds[-1] - thresholds[0])
    labels = band_labels(thresholds)
    return cm.StepColormap(
        colors=list(BAND_COLORS),
        index=[0, *thresholds, upper],
        vmin=0,
        vmax=upper,
        caption="Index value: " + ", ".join(labels[band] for band in sorted(labels)),
    )

def feature_style(feature: Dict[str, Any], store: DivisionIndexStore) -> Dict[str, Any]:
    """
    Style of one division polygon. Divisions without data for the active
    period get the no-data colour.
    """
    division_id = division_id_of(feature.get("properties") or {})
    band = store.color_for(division_id) if division_id is not None else ColorBand.NO_DATA
    return {"fillColor": band.color, **FEATURE_STYLE}

def hover_style(feature: Dict[str, Any]) -> Dict[str, Any]:
    return dict(HOVER_STYLE)

def _format_index(value: Optional[float]) -> str:
    return "No data" if value is None else f"{value:g}"

def attach_index(gdf: GeoDataFrame, store: DivisionIndexStore) -> GeoDataFrame:
    """Joins the active period's index value and band onto the division geometries."""
    merged = gdf.copy()
    if DIVISION_NAME_PROPERTY not in merged.columns:
        merged[DIVISION_NAME_PROPERTY] = ""
    merged[DIVISION_NAME_PROPERTY] = merged[DIVISION_NAME_PROPERTY].fillna("")

    values = [store.value_for(d) if d is not None else None for d in merged["division_id"]]
    bands = [store.color_for(d) if d is not None else ColorBand.NO_DATA for d in merged["division_id"]]
    merged["index_label"] = [_format_index(v) for v in values]
    merged["band"] = [band.name.lower() for band in bands]
    merged["fill_color"] = [band.color for band in bands]
    return merged


def division_table(store: DivisionIndexStore) -> pd.DataFrame:
    """The active period's division index as a flat table, for download."""
    snapshot = store.snapshot
    if snapshot is None:
        return pd.DataFrame(columns=["division_id", "period", "value", "band"])
    table = snapshot.index.to_frame(snapshot.period)
    table["band"] = [snapshot.color_by_division[division_id].name.lower() for division_id in table["division_id"]]
    return table.sort_values("division_id").reset_index(drop=True)


def build_popup(properties: Dict[str, Any], store: DivisionIndexStore, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Content of the popup shown when a division is clicked.

    The premium rate is omitted when it is unknown. Insurer details are only
    shown for periods that are not in the past, and the calculator is only
    offered when both the rate and an insurer are known.
    """
    today = today or date.today()
    division_id = division_id_of(properties)
    snapshot = store.snapshot

    rate = store.rate_for(division_id) if division_id is not None else None
    insurer = insurers_for(properties.get("DISTRICT"), properties.get("COUNTRY"))
    show_insurer = snapshot is not None and today.year <= snapshot.period.year

    return {
        "division_id": division_id,
        "name": properties.get(DIVISION_NAME_PROPERTY) or "Unknown division",
        "period_label": snapshot.period.label if snapshot else None,
        "index_value": store.value_for(division_id) if division_id is not None else None,
        "band": store.color_for(division_id) if division_id is not None else ColorBand.NO_DATA,
        "premium_rate": format_rate(rate),
        "rate_percent": rate * 100 if rate is not None else None,
        "show_insurer": show_insurer,
        "insurer_text": insurer.markdown,
        "insurers": list(insurer.codes),
        "calculator_enabled": rate is not None and insurer.is_known,
        "windows": sales_and_payout_windows(today),
    }

# --- Main Map Creation Function ---

def create_interactive_map(gdf: GeoDataFrame, store: DivisionIndexStore) -> Optional[Dict[str, Any]]:
    """
    Creates and displays the interactive Folium map of the division index.

    Args:
        gdf: A GeoDataFrame of division geometries with a ``division_id`` column.
        store: The store holding the active period's index.

    Returns:
        The properties of the last clicked division, or None if nothing was clicked.
    """
    # 1. Prepare data for the map
    if store.snapshot is None:
        st.warning("No index data available to display on the map.")
        return None

    map_data = attach_index(gdf, store)

    # 2. Create the base map
    (south, west), (north, east) = MAX_BOUNDS
    m = folium.Map(
        location=DEFAULT_MAP_LOCATION,
        zoom_start=DEFAULT_ZOOM,
        min_zoom=MIN_ZOOM,
        max_zoom=MAX_ZOOM,
        max_bounds=True,
        min_lat=south,
        max_lat=north,
        min_lon=west,
        max_lon=east,
        scrollWheelZoom=False,
    )

    # 3. Create and add the legend
    m.add_child(get_legend())

    # 4. Create and add the GeoJson layer with tooltips
    tooltip = GeoJsonTooltip(
        fields=[DIVISION_NAME_PROPERTY, "index_label"],
        aliases=["Division:", "Index:"],
        localize=True,
        sticky=False,
    )

    geojson_layer = GeoJson(
        map_data,
        style_function=lambda feature: feature_style(feature, store),
        highlight_function=hover_style,
        tooltip=tooltip,
        name="divisions",
    )
    geojson_layer.add_to(m)

    # 5. Display the map and capture user interaction
    map_output = st_folium(m, width="100%", height=550, returned_objects=["last_active_drawing"])

    clicked = map_output.get("last_active_drawing") if map_output else None
    if clicked:
        return clicked.get("properties") or None
    return None
