# schemas.py
"""Data validation schemas for the IBLI division map."""

import pandera as pa
from pandera.typing import Series

PERIOD_PATTERN = r"\d{4}[LS]"


class IndexValueSchema(pa.DataFrameModel):
    """Schema for the long-format index table: one row per division and period."""
    division_id: Series[int] = pa.Field(ge=0, nullable=False)
    period: Series[str] = pa.Field(str_contains=PERIOD_PATTERN, nullable=False)
    value: Series[float] = pa.Field(nullable=False)

    class Config:
        coerce = True


class RatesSchema(pa.DataFrameModel):
    """Schema for the premium rates table, flattened to one row per division and season."""
    division_id: Series[int] = pa.Field(ge=0, nullable=False)
    season_key: Series[str] = pa.Field(str_matches=r"^(Jan/Feb|Aug/Sep)\d{4}$", nullable=False)
    rate: Series[float] = pa.Field(in_range={"min_value": 0, "max_value": 1}, nullable=False)

    class Config:
        coerce = True
