"""
Premium rate lookup and the livestock premium calculator.

Rates are stored as fractions keyed by division id and a season key such as
``Aug/Sep2014``. A division missing from the table means the rate is unknown,
which is reported as None and never as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from config import ANIMAL_VALUES
from index_parser import DataFormatError, Period
from schemas import RatesSchema

RatesTable = Dict[int, Dict[str, float]]

LONG_SEASON_SALES = "Aug/Sep"
SHORT_SEASON_SALES = "Jan/Feb"


def parse_rates(payload: Mapping[str, Any]) -> RatesTable:
    """
    Converts the decoded rates JSON into a RatesTable.

    Entries whose rate is not a number are dropped. Raises DataFormatError when
    the payload is not an object of objects or fails schema validation.
    """
    if not isinstance(payload, Mapping):
        raise DataFormatError("The rates data must be a JSON object keyed by division id.")

    records = []
    for division_id, seasons in payload.items():
        if not isinstance(seasons, Mapping):
            raise DataFormatError(f"Rates for division {division_id} must be a JSON object.")
        for key, rate in seasons.items():
            records.append({"division_id": division_id, "season_key": key, "rate": rate})

    df = pd.DataFrame(records, columns=["division_id", "season_key", "rate"])
    df["rate"] = pd.to_numeric(df["rate"], errors="coerce")
    df.dropna(subset=["rate"], inplace=True)

    try:
        validated = RatesSchema.validate(df)
    except (SchemaError, SchemaErrors) as e:
        raise DataFormatError(f"The rates data failed validation: {e}") from e

    table: RatesTable = {}
    for row in validated.itertuples(index=False):
        table.setdefault(int(row.division_id), {})[row.season_key] = float(row.rate)
    return table


def season_key(period: Period) -> str:
    """Rates table key for a period, e.g. ``Aug/Sep2014`` for the 2014 long season."""
    sales = SHORT_SEASON_SALES if period.short_season else LONG_SEASON_SALES
    return f"{sales}{period.year}"


def lookup_rate(rates: Mapping[int, Mapping[str, float]], division_id: int, period: Period) -> Optional[float]:
    """Returns the unrounded premium rate fraction, or None when it is unknown."""
    seasons = rates.get(division_id)
    if seasons is None:
        return None
    rate = seasons.get(season_key(period))
    if rate is None or math.isnan(rate):
        return None
    return rate


def format_rate(rate: Optional[float]) -> Optional[str]:
    """Percentage string with two decimals, e.g. 0.1234 -> '12.34'."""
    if rate is None:
        return None
    return f"{rate * 100:.2f}"


@dataclass(frozen=True)
class LivestockCounts:
    cows: int = 0
    camels: int = 0
    goats: int = 0

    @classmethod
    def from_form(cls, cows=None, camels=None, goats=None) -> "LivestockCounts":
        """Builds counts from form input, where blank fields count as zero."""
        return cls(cows=_count(cows), camels=_count(camels), goats=_count(goats))

    def as_dict(self) -> Dict[str, int]:
        return {"cows": self.cows, "camels": self.camels, "goats": self.goats}


def _count(raw) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0
    count = int(raw)
    if count < 0:
        raise ValueError(f"Animal counts cannot be negative, got {count}.")
    return count


def calculate_premium(counts: LivestockCounts, rate_percent: float, per_animal_value: Mapping[str, float]) -> float:
    """Premium for the insured herd: total insured value times the rate."""
    insured_value = sum(count * per_animal_value[species] for species, count in counts.as_dict().items())
    return insured_value * (rate_percent / 100)


def calculate_for_insurers(
    counts: LivestockCounts,
    rate_percent: float,
    insurers: Iterable[str],
    animal_values: Mapping[str, Mapping[str, float]] = ANIMAL_VALUES,
) -> Dict[str, float]:
    """Premium per insurer, each priced with that insurer's own animal valuations."""
    results = {}
    for insurer in insurers:
        per_animal_value = {species: values[insurer] for species, values in animal_values.items()}
        results[insurer] = calculate_premium(counts, rate_percent, per_animal_value)
    return results
