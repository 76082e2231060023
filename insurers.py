"""Attribution of insurers to divisions by district and country."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

INSURER_NAMES: Dict[str, str] = {
    "TIA": "Takaful",
    "APA": "APA",
    "OIC": "OIC",
}
INSURER_LINKS: Dict[str, str] = {
    "TIA": "http://www.takafulafrica.com/",
    "APA": "http://www.apainsurance.org/",
}

# Kenyan districts with a known insurer. Every other district is still to be decided.
DISTRICT_INSURERS: Dict[str, Tuple[str, ...]] = {
    "WAJIR": ("TIA",),
    "MANDERA": ("TIA",),
    "GARISSA": ("TIA",),
    "ISIOLO": ("TIA", "APA"),
    "MARSABIT": ("APA",),
}
ETHIOPIA_INSURERS: Tuple[str, ...] = ("OIC",)
UNDECIDED = "TBD"


@dataclass(frozen=True)
class InsurerAssignment:
    codes: Tuple[str, ...]

    @property
    def is_known(self) -> bool:
        return bool(self.codes)

    @property
    def text(self) -> str:
        if not self.codes:
            return UNDECIDED
        return " | ".join(INSURER_NAMES[code] for code in self.codes)

    @property
    def markdown(self) -> str:
        """Insurer names, linked to their websites where one is known."""
        if not self.codes:
            return UNDECIDED
        parts = []
        for code in self.codes:
            link = INSURER_LINKS.get(code)
            parts.append(f"[{INSURER_NAMES[code]}]({link})" if link else INSURER_NAMES[code])
        return " | ".join(parts)


def insurers_for(district: Optional[str], country: Optional[str] = None) -> InsurerAssignment:
    """Insurers selling cover in a division. OIC covers all of Ethiopia regardless of district."""
    if country and country.strip().upper() == "ETHIOPIA":
        return InsurerAssignment(codes=ETHIOPIA_INSURERS)
    codes = DISTRICT_INSURERS.get((district or "").strip().upper(), ())
    return InsurerAssignment(codes=codes)
