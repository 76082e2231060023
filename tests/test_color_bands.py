import math

import pytest

from color_bands import ColorBand, band_labels, classify, classify_by_rank
from config import BAND_COLORS, NO_DATA_COLOR

THRESHOLDS = [0.06, 0.08, 0.10, 0.15]


def test_classify_examples():
    assert classify(0.07, THRESHOLDS) is ColorBand.LOW
    assert classify(0.20, THRESHOLDS) is ColorBand.EXTREME
    assert classify(0.0, THRESHOLDS) is ColorBand.LOWEST
    assert classify(-1.0, THRESHOLDS) is ColorBand.LOWEST


@pytest.mark.parametrize("position, threshold", list(enumerate(THRESHOLDS)))
def test_threshold_boundaries_are_half_open(position, threshold):
    """Just below a threshold and at it fall into adjacent bands; equal belongs to the higher band."""
    below = classify(threshold - 1e-9, THRESHOLDS)
    at = classify(threshold, THRESHOLDS)
    assert below == ColorBand(position + 1)
    assert at == ColorBand(position + 2)
    assert classify(threshold + 1e-9, THRESHOLDS) == at


def test_missing_value_is_no_data():
    assert classify(None, THRESHOLDS) is ColorBand.NO_DATA
    assert classify(math.nan, THRESHOLDS) is ColorBand.NO_DATA


def test_every_value_gets_a_classified_band():
    for value in [-100, 0, 0.05, 0.09, 0.12, 1, 1e9, math.inf]:
        assert classify(value, THRESHOLDS) is not ColorBand.NO_DATA


@pytest.mark.parametrize("thresholds", [[0.06, 0.08, 0.10], [0.06, 0.08, 0.08, 0.15], [0.15, 0.10, 0.08, 0.06]])
def test_invalid_thresholds_raise(thresholds):
    with pytest.raises(ValueError):
        classify(0.1, thresholds)


def test_classify_by_rank_puts_rank_one_at_the_extreme():
    assert classify_by_rank(1) is ColorBand.EXTREME
    assert classify_by_rank(2) is ColorBand.HIGH
    assert classify_by_rank(3) is ColorBand.MEDIUM
    assert classify_by_rank(4) is ColorBand.LOW
    assert classify_by_rank(5) is ColorBand.LOWEST
    assert classify_by_rank(3.0) is ColorBand.MEDIUM


@pytest.mark.parametrize("rank", [0, 6, -1, 2.5])
def test_classify_by_rank_out_of_range(rank):
    with pytest.raises(ValueError):
        classify_by_rank(rank)


def test_band_colors():
    assert ColorBand.LOWEST.color == BAND_COLORS[0]
    assert ColorBand.EXTREME.color == BAND_COLORS[-1]
    assert ColorBand.NO_DATA.color == NO_DATA_COLOR
    assert NO_DATA_COLOR not in BAND_COLORS


def test_band_labels():
    labels = band_labels(THRESHOLDS)
    assert labels == {
        ColorBand.LOWEST: "< 0.06",
        ColorBand.LOW: "0.06 - 0.08",
        ColorBand.MEDIUM: "0.08 - 0.1",
        ColorBand.HIGH: "0.1 - 0.15",
        ColorBand.EXTREME: ">= 0.15",
    }
