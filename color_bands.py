"""
Classification of index values into the five severity bands of the choropleth.

Bands ascend in severity: a higher index value lands in a more severe band.
The colour ramp follows the same direction, from green (lowest) to black
(extreme). Precomputed ranks use the opposite ordinal, rank 1 being the worst.
"""

import math
from enum import IntEnum
from typing import Dict, Optional, Sequence

from config import BAND_COLORS, BAND_THRESHOLDS, NO_DATA_COLOR

BAND_COUNT = 5


class ColorBand(IntEnum):
    NO_DATA = 0
    LOWEST = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    EXTREME = 5

    @property
    def color(self) -> str:
        if self is ColorBand.NO_DATA:
            return NO_DATA_COLOR
        return BAND_COLORS[self.value - 1]


def _check_thresholds(thresholds: Sequence[float]) -> None:
    if len(thresholds) != BAND_COUNT - 1:
        raise ValueError(f"Expected {BAND_COUNT - 1} thresholds, got {len(thresholds)}.")
    if any(lower >= upper for lower, upper in zip(thresholds, thresholds[1:])):
        raise ValueError(f"Thresholds must be strictly ascending: {list(thresholds)}")


def classify(value: Optional[float], thresholds: Sequence[float] = BAND_THRESHOLDS) -> ColorBand:
    """
    Maps an index value to its band using half-open thresholds.

    A value equal to a threshold belongs to the higher band; anything at or
    beyond the last threshold is EXTREME. Missing values are NO_DATA.
    """
    _check_thresholds(thresholds)
    if value is None or math.isnan(value):
        return ColorBand.NO_DATA
    for position, threshold in enumerate(thresholds):
        if value < threshold:
            return ColorBand(position + 1)
    return ColorBand.EXTREME


def classify_by_rank(rank: int) -> ColorBand:
    """Maps a precomputed rank 1..5 to its band; rank 1 is EXTREME, rank 5 is LOWEST."""
    if isinstance(rank, bool) or int(rank) != rank or not 1 <= rank <= BAND_COUNT:
        raise ValueError(f"Rank must be an integer between 1 and {BAND_COUNT}, got {rank!r}.")
    return ColorBand(BAND_COUNT + 1 - int(rank))


def band_labels(thresholds: Sequence[float] = BAND_THRESHOLDS) -> Dict[ColorBand, str]:
    """Legend label of the value range covered by each classified band."""
    _check_thresholds(thresholds)
    labels = {ColorBand.LOWEST: f"< {thresholds[0]:g}"}
    for position, (lower, upper) in enumerate(zip(thresholds, thresholds[1:])):
        labels[ColorBand(position + 2)] = f"{lower:g} - {upper:g}"
    labels[ColorBand.EXTREME] = f">= {thresholds[-1]:g}"
    return labels
