import json
import os
from typing import Any, Dict, List, Mapping, Optional

import geopandas as gpd
import pandas as pd
import requests
import streamlit as st

from config import (
    DATA_SOURCE,
    DIVISION_ID_PROPERTIES,
    FETCH_TIMEOUT_SECONDS,
    GEOJSON_PATH,
    INDEX_CSV_PATH,
    RATES_PATH,
)
from index_parser import DataFormatError
from index_store import DivisionIndexStore


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_text(path: str, source: str = DATA_SOURCE) -> str:
    """
    Reads one data file, either over HTTP or from a local directory.

    Raises:
        requests.RequestException: If the HTTP request fails or times out.
        OSError: If the local file cannot be read.
    """
    if _is_remote(source):
        url = f"{source.rstrip('/')}/{path.lstrip('/')}"
        print(f"[FETCH] GET {url}")
        response = requests.get(url, timeout=FETCH_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.text

    file_path = os.path.join(source, path)
    print(f"[FETCH] Reading {file_path}")
    with open(file_path, encoding="utf-8") as f:
        return f.read()


def fetch_json(path: str, source: str = DATA_SOURCE) -> Any:
    text = fetch_text(path, source)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DataFormatError(f"{path} is not valid JSON: {e}") from e


def fetch_index_csv() -> str:
    """Raw text of the index CSV."""
    return fetch_text(INDEX_CSV_PATH)


def fetch_rates() -> Any:
    """Decoded rates JSON, keyed by division id."""
    return fetch_json(RATES_PATH)


def division_id_of(properties: Mapping[str, Any]) -> Optional[int]:
    """Division id of a GeoJSON feature, read from the first id property present."""
    for name in DIVISION_ID_PROPERTIES:
        raw = properties.get(name)
        if raw is None or raw == "":
            continue
        try:
            return int(float(raw))
        except (TypeError, ValueError):
            return None
    return None


def load_divisions(geojson: Dict[str, Any]) -> gpd.GeoDataFrame:
    """
    Converts a GeoJSON FeatureCollection of divisions into a GeoDataFrame with
    a ``division_id`` column.
    """
    if not isinstance(geojson, dict) or geojson.get("type") != "FeatureCollection":
        raise DataFormatError("The division boundaries must be a GeoJSON FeatureCollection.")

    features: List[Dict[str, Any]] = geojson.get("features") or []
    gdf = gpd.GeoDataFrame.from_features(features, crs="EPSG:4326")
    gdf["division_id"] = pd.Series(
        [division_id_of(feature.get("properties") or {}) for feature in features],
        index=gdf.index,
        dtype="object",
    )
    return gdf


@st.cache_data(show_spinner=False)
def _load_geojson() -> gpd.GeoDataFrame:
    return load_divisions(fetch_json(GEOJSON_PATH))


def get_geojson() -> gpd.GeoDataFrame | None:
    """
    Loads the division boundaries.
    Cached indefinitely as it's a static file; failures are not cached.
    """
    try:
        return _load_geojson()
    except requests.exceptions.HTTPError as e:
        st.error(f"Failed to download the division boundaries: Server error ({e.response.status_code}).")
    except (requests.RequestException, OSError, DataFormatError) as e:
        st.error(f"Failed to load the division boundaries. Error: {e}")
    return None


def create_store() -> DivisionIndexStore:
    """A fresh store wired to the configured data source."""
    return DivisionIndexStore(fetch_index=fetch_index_csv, fetch_rates=fetch_rates)
