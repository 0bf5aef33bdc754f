"""Row parsing, validation, and batch summaries for ad performance data."""

from .service import METRICS_INVALID, NAME_PARSE_FAILED, IngestionPipeline, parse_number

__all__ = ["IngestionPipeline", "METRICS_INVALID", "NAME_PARSE_FAILED", "parse_number"]
