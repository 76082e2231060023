"""Calendar-derived season and the upcoming sales / payout windows."""

from datetime import date
from enum import Enum
from typing import Dict, Optional


class Season(Enum):
    LONG_RAINS = "LRLD"
    SHORT_RAINS = "SRSD"


def current_season(today: Optional[date] = None) -> Season:
    """March to September is the long rains season, the rest of the year the short rains."""
    today = today or date.today()
    return Season.LONG_RAINS if 3 <= today.month <= 9 else Season.SHORT_RAINS


def sales_and_payout_windows(today: Optional[date] = None) -> Dict[str, str]:
    """
    Labels of the next sales window and the next two potential payouts.

    Returns:
        dict: ``sales_date`` (next sales window), ``cur_payout`` (nearest
        potential payout) and ``new_payout`` (the payout after that).
    """
    today = today or date.today()
    year, month = today.year, today.month

    if month <= 3:
        return {"new_payout": f"October {year}", "cur_payout": f"March {year}", "sales_date": f"Jan/Feb {year}"}
    if month == 4:
        return {"new_payout": f"October {year}", "cur_payout": f"March {year}", "sales_date": f"Aug/Sep {year}"}
    if month <= 10:
        return {"new_payout": f"March {year + 1}", "cur_payout": f"October {year}", "sales_date": f"Aug/Sep {year}"}
    return {"new_payout": f"October {year + 1}", "cur_payout": f"March {year + 1}", "sales_date": f"Jan/Feb {year + 1}"}
