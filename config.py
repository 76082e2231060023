# config.py

"""
Central configuration file for the IBLI division map.
This file stores constants and settings to make the application more maintainable.
"""

import os
from typing import Dict, Final, List, Tuple

# Base location of the data files. Either an http(s) URL or a local directory.
DATA_SOURCE: Final[str] = os.environ.get("IBLI_DATA_SOURCE", "http://127.0.0.1:9000")

# Paths of the data files, relative to DATA_SOURCE
INDEX_CSV_PATH: Final[str] = "sites/default/files/data/zCumNDVI_Percentile.csv"
GEOJSON_PATH: Final[str] = "sites/default/files/data/KenyaEthiopia_IBLIunits_July2014.geojson"
RATES_PATH: Final[str] = "sites/default/files/data/rates.json"

# Seconds to wait for any single data file before giving up
FETCH_TIMEOUT_SECONDS: Final[float] = 30.0

# GeoJSON property names carrying the division identifier, in order of preference
DIVISION_ID_PROPERTIES: Final[Tuple[str, ...]] = ("IBLI_ID", "DIV_ID")
DIVISION_NAME_PROPERTY: Final[str] = "IBLI_UNIT"

# Choropleth classification
CLASSIFICATION_SCHEME: Final[str] = "threshold"  # or "rank"
BAND_THRESHOLDS: Final[Tuple[float, ...]] = (0.06, 0.08, 0.10, 0.15)
# Ordered from the lowest band to the extreme band
BAND_COLORS: Final[Tuple[str, ...]] = ("#00AA00", "#DDDD00", "#BB5500", "#AA0000", "#000000")
NO_DATA_COLOR: Final[str] = "#808080"

# Map options
DEFAULT_MAP_LOCATION: Final[List[float]] = [1.1864, 37.925]
DEFAULT_ZOOM: Final[int] = 6
MIN_ZOOM: Final[int] = 6
MAX_ZOOM: Final[int] = 9
MAX_BOUNDS: Final[List[List[float]]] = [[-9.282399, 31.662597], [10.368303, 44.703369]]

FEATURE_STYLE: Final[Dict[str, object]] = {
    "weight": 2,
    "opacity": 1,
    "color": "white",
    "dashArray": "3",
    "fillOpacity": 0.6,
}
HOVER_STYLE: Final[Dict[str, object]] = {"weight": 2, "fillOpacity": 0.2}

# Insured value of one animal, per species and insurer
ANIMAL_VALUES: Final[Dict[str, Dict[str, int]]] = {
    "camels": {"APA": 28000, "TIA": 35000, "OIC": 10000},
    "cows": {"APA": 20000, "TIA": 25000, "OIC": 6000},
    "goats": {"APA": 2000, "TIA": 2500, "OIC": 8000},
}
