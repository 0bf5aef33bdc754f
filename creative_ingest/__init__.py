"""Top-level package for creative name encoding and ad metrics ingestion."""

from . import naming  # noqa: F401
from .models import (
    AdMetrics,
    IngestedRow,
    IngestionStats,
    RowStatus,
    StructuredName,
)
from .pipeline import IngestionPipeline  # noqa: F401
from .state_router import FoldState, StateRouter  # noqa: F401

__all__ = [
    "AdMetrics",
    "FoldState",
    "IngestedRow",
    "IngestionPipeline",
    "IngestionStats",
    "RowStatus",
    "StateRouter",
    "StructuredName",
    "naming",
    "ingestion",
    "report",
]
