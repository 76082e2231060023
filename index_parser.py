"""
Parsing of the tabular index file.

The index CSV carries one row per division and one column per period. The first
column is the division id; any header cell containing a 4-digit year followed by
``L`` (long season) or ``S`` (short season) is a period column, everything else
(names, districts, ...) is ignored.

Cells that are not numeric are skipped rather than replaced by a sentinel, so a
division without a usable value is simply absent from that period's mapping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from io import StringIO
from typing import Dict, Optional, Tuple, Union

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from schemas import PERIOD_PATTERN, IndexValueSchema

_PERIOD_RE = re.compile(PERIOD_PATTERN)

# Ids at or above this do not fit an int64
MAX_DIVISION_ID = 2 ** 63


class DataFormatError(ValueError):
    """Raised when a whole payload cannot be used (empty, no header, unknown period)."""


@dataclass(frozen=True)
class Period:
    """One year + season column of index data, e.g. ``2013S``."""
    value: str
    year: int
    short_season: bool

    @classmethod
    def from_header(cls, header: str) -> Optional["Period"]:
        """Build a Period from a header cell, or None if the cell is not a period column."""
        match = _PERIOD_RE.search(str(header))
        if not match:
            return None
        token = match.group(0)
        return cls(value=str(header), year=int(token[:4]), short_season=token[-1] == "S")

    @property
    def season_name(self) -> str:
        return "Short season" if self.short_season else "Long season"

    @property
    def label(self) -> str:
        return f"{self.year}, {self.season_name}"

    def as_option(self) -> Dict[str, str]:
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True)
class ParsedIndex:
    """Result of parsing the index CSV. ``periods`` is ordered most recent first."""
    periods: Tuple[Period, ...]
    values_by_period: Dict[str, Dict[int, float]] = field(default_factory=dict)
    skipped_cells: int = 0

    @property
    def latest(self) -> Optional[Period]:
        return self.periods[0] if self.periods else None

    def get_period(self, value: str) -> Optional[Period]:
        for period in self.periods:
            if period.value == value:
                return period
        return None

    def values_for(self, period: Union[Period, str]) -> Dict[int, float]:
        key = period.value if isinstance(period, Period) else period
        return self.values_by_period.get(key, {})

    def to_frame(self, period: Union[Period, str, None] = None) -> pd.DataFrame:
        """
        Returns the index as a validated long table (division_id, period, value),
        for one period or for all of them.

        Raises:
            DataFormatError: If the table fails schema validation.
        """
        periods = self.periods if period is None else [p for p in self.periods if p == period or p.value == period]
        records = [
            {"division_id": division_id, "period": p.value, "value": value}
            for p in periods
            for division_id, value in self.values_for(p).items()
        ]
        frame = pd.DataFrame(records, columns=["division_id", "period", "value"])
        try:
            return IndexValueSchema.validate(frame)
        except (SchemaError, SchemaErrors) as e:
            raise DataFormatError(f"The index data failed validation: {e}") from e


def parse_index_csv(raw_csv: str) -> ParsedIndex:
    """
    Parses the raw index CSV into its period catalog and per-period values.

    Args:
        raw_csv: The CSV text. The first line is the header row.

    Returns:
        A ParsedIndex whose periods are in reverse header order, so the newest
        (rightmost) column comes first. A period header that appears more than
        once keeps only its rightmost column.

    Raises:
        DataFormatError: If the payload is empty or has no header row.
    """
    if raw_csv is None or not raw_csv.strip():
        raise DataFormatError("The index data is empty.")

    lines = raw_csv.splitlines()
    header_at = next(position for position, line in enumerate(lines) if line.strip())
    body = "\n".join(lines[header_at + 1:])

    # The header row is read on its own so repeated headers keep their exact text
    try:
        headers = pd.read_csv(
            StringIO(lines[header_at]), header=None, dtype=str, keep_default_na=False
        ).iloc[0].tolist()
        positions = list(range(len(headers)))
        if body.strip():
            df = pd.read_csv(
                StringIO(body),
                header=None,
                names=positions,
                dtype=str,
                index_col=False,
                keep_default_na=False,
                skip_blank_lines=True,
                on_bad_lines="skip",
            )
        else:
            df = pd.DataFrame(columns=positions, dtype=str)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise DataFormatError(f"The index data could not be read: {e}") from e

    ids = pd.to_numeric(df[0], errors="coerce")
    valid_id = ids.notna() & (ids >= 0) & (ids < MAX_DIVISION_ID)

    # A repeated period header keeps only its rightmost column
    period_columns: Dict[str, Tuple[Period, int]] = {}
    for position, header in enumerate(headers):
        period = Period.from_header(header)
        if period is None:
            continue
        period_columns.pop(period.value, None)
        period_columns[period.value] = (period, position)

    periods = []
    values_by_period: Dict[str, Dict[int, float]] = {}
    skipped = 0
    for period, position in period_columns.values():
        values = pd.to_numeric(df[position], errors="coerce")
        usable = valid_id & values.notna()
        skipped += int(len(df) - usable.sum())

        # Later rows overwrite earlier ones for a repeated division id
        division_ids = ids[usable].astype("int64").tolist()
        values_by_period[period.value] = dict(zip(division_ids, values[usable].astype(float).tolist()))
        periods.append(period)

    periods.reverse()
    return ParsedIndex(periods=tuple(periods), values_by_period=values_by_period, skipped_cells=skipped)
