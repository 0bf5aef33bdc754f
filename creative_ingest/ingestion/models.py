"""Row shapes produced by the spreadsheet loaders."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

AD_NAME = "Ad Name"
SPEND = "Spend"
CPA = "CPA"
ROAS = "ROAS"
IMPRESSIONS = "Impressions"
CLICKS = "Clicks"
CONVERSIONS = "Conversions"

REQUIRED_COLUMNS = (AD_NAME, SPEND, CPA, ROAS)
OPTIONAL_COLUMNS = (IMPRESSIONS, CLICKS, CONVERSIONS)


@dataclass(frozen=True, slots=True)
class AdRow:
    """Text values of one ad performance row, keyed by known columns only."""

    ad_name: str = ""
    spend: str = ""
    cpa: str = ""
    roas: str = ""
    impressions: Optional[str] = None
    clicks: Optional[str] = None
    conversions: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "AdRow":
        """Build a row from a sheet-style mapping such as ``{"Ad Name": ...}``."""

        return cls(
            ad_name=_text(row.get(AD_NAME)) or "",
            spend=_text(row.get(SPEND)) or "",
            cpa=_text(row.get(CPA)) or "",
            roas=_text(row.get(ROAS)) or "",
            impressions=_text(row.get(IMPRESSIONS)),
            clicks=_text(row.get(CLICKS)),
            conversions=_text(row.get(CONVERSIONS)),
        )

    def as_mapping(self) -> Dict[str, str]:
        row = {AD_NAME: self.ad_name, SPEND: self.spend, CPA: self.cpa, ROAS: self.roas}
        for column, value in (
            (IMPRESSIONS, self.impressions),
            (CLICKS, self.clicks),
            (CONVERSIONS, self.conversions),
        ):
            if value is not None:
                row[column] = value
        return row


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


__all__ = [
    "AD_NAME",
    "AdRow",
    "CLICKS",
    "CONVERSIONS",
    "CPA",
    "IMPRESSIONS",
    "OPTIONAL_COLUMNS",
    "REQUIRED_COLUMNS",
    "ROAS",
    "SPEND",
]
