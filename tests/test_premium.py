import pytest

from config import ANIMAL_VALUES
from index_parser import DataFormatError, Period
from premium import (
    LivestockCounts,
    calculate_for_insurers,
    calculate_premium,
    format_rate,
    lookup_rate,
    parse_rates,
    season_key,
)
from conftest import SAMPLE_RATES

LONG_2013 = Period(value="2013L", year=2013, short_season=False)
SHORT_2013 = Period(value="2013S", year=2013, short_season=True)


@pytest.fixture
def rates():
    return parse_rates(SAMPLE_RATES)


def test_season_key():
    assert season_key(LONG_2013) == "Aug/Sep2013"
    assert season_key(SHORT_2013) == "Jan/Feb2013"


def test_parse_rates_keys_by_integer_division(rates):
    assert rates == {
        1: {"Aug/Sep2013": 0.0525, "Jan/Feb2013": 0.061},
        3: {"Aug/Sep2013": 0.08},
    }


def test_parse_rates_drops_non_numeric_rates():
    assert parse_rates({"7": {"Aug/Sep2014": None, "Jan/Feb2015": "n/a"}, "8": {"Jan/Feb2015": "0.04"}}) == {
        8: {"Jan/Feb2015": 0.04}
    }


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"1": 0.05},
        {"1": {"Aug/Sep2013": 1.5}},
        {"x": {"Aug/Sep2013": 0.05}},
        {"1.0": {"Aug/Sep2013": 0.05}},
        {"1": {"Spring2013": 0.05}},
    ],
)
def test_parse_rates_rejects_invalid_payloads(payload):
    with pytest.raises(DataFormatError):
        parse_rates(payload)


def test_lookup_rate(rates):
    assert lookup_rate(rates, 1, LONG_2013) == 0.0525
    assert lookup_rate(rates, 1, SHORT_2013) == 0.061


def test_lookup_rate_unknown_division_is_none_not_zero(rates):
    assert lookup_rate(rates, 2, LONG_2013) is None
    assert lookup_rate(rates, 3, SHORT_2013) is None


def test_lookup_rate_is_deterministic(rates):
    results = {lookup_rate(rates, 1, LONG_2013) for _ in range(10)}
    assert results == {0.0525}


def test_format_rate():
    assert format_rate(0.0525) == "5.25"
    assert format_rate(0.123456) == "12.35"
    assert format_rate(None) is None


def test_calculate_premium_example():
    counts = LivestockCounts(cows=2, camels=0, goats=1)
    per_animal_value = {"cows": 25000, "camels": 35000, "goats": 2500}
    assert calculate_premium(counts, 10, per_animal_value) == pytest.approx(5250)


def test_zero_counts_cost_nothing_for_every_insurer():
    premiums = calculate_for_insurers(LivestockCounts(), 7.5, ["APA", "TIA", "OIC"])
    assert premiums == {"APA": 0, "TIA": 0, "OIC": 0}


def test_each_insurer_uses_its_own_valuation():
    counts = LivestockCounts(cows=1, camels=1, goats=1)
    premiums = calculate_for_insurers(counts, 10, ["TIA", "APA"])
    assert premiums["TIA"] == pytest.approx((25000 + 35000 + 2500) * 0.1)
    assert premiums["APA"] == pytest.approx((20000 + 28000 + 2000) * 0.1)


def test_calculate_for_insurers_with_custom_table():
    table = {species: {"XYZ": 100} for species in ANIMAL_VALUES}
    premiums = calculate_for_insurers(LivestockCounts(cows=3), 50, ["XYZ"], table)
    assert premiums == {"XYZ": pytest.approx(150)}


def test_counts_from_form_treat_blanks_as_zero():
    counts = LivestockCounts.from_form(cows=None, camels="", goats="4")
    assert counts == LivestockCounts(cows=0, camels=0, goats=4)


def test_counts_from_form_reject_negative_numbers():
    with pytest.raises(ValueError):
        LivestockCounts.from_form(cows=-1)
