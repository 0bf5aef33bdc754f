"""Data models shared by the naming codec, ingestion pipeline, and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


# --- Structured names ---

@dataclass(frozen=True, slots=True)
class StructuredName:
    """A creative name split into its date and categorical tags."""

    a1: str
    a2: str
    b: str
    c: str
    d: str
    date: Optional[str] = None

    @property
    def tag_key(self) -> str:
        """Grouping key combining the primary scene and action tags."""
        return f"{self.a1}_{self.b}"

    def tag(self, category: str) -> str:
        """Return the tag stored for ``category`` (``"A1"`` ... ``"D"``)."""
        return getattr(self, category.lower())

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "date": self.date,
            "A1": self.a1,
            "A2": self.a2,
            "B": self.b,
            "C": self.c,
            "D": self.d,
        }


# --- Metrics ---

@dataclass(frozen=True, slots=True)
class AdMetrics:
    """Numeric performance values parsed from a spreadsheet row."""

    spend: float = 0.0
    cpa: float = 0.0
    roas: float = 0.0
    impressions: Optional[float] = None
    clicks: Optional[float] = None
    conversions: Optional[float] = None


NAME_PARSE_FAILED = "name parse failed"
METRICS_INVALID = "metrics invalid"


class RowStatus(str, Enum):
    """Outcome assigned to every ingested row."""

    SUCCESS = "SUCCESS"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass(frozen=True, slots=True)
class IngestedRow:
    """Result of parsing one spreadsheet row."""

    raw_name: str
    metrics: AdMetrics
    status: RowStatus
    decoded: Optional[StructuredName] = None
    errors: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is RowStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class IngestionStats:
    """Status counts for a batch of ingested rows."""

    total: int = 0
    success: int = 0
    parse_errors: int = 0
    validation_errors: int = 0
    success_rate: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "total": self.total,
            "success": self.success,
            "parseErrors": self.parse_errors,
            "validationErrors": self.validation_errors,
            "successRate": self.success_rate,
        }


__all__ = [
    "AdMetrics",
    "IngestedRow",
    "IngestionStats",
    "METRICS_INVALID",
    "NAME_PARSE_FAILED",
    "RowStatus",
    "StructuredName",
]
