"""Ingestion pipeline that decodes ad names and validates metrics."""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .. import naming
from ..config import IngestionSettings
from ..grouping import deduplicate_rows, group_rows, tag_key
from ..ingestion.models import AdRow
from ..models import (
    METRICS_INVALID,
    NAME_PARSE_FAILED,
    AdMetrics,
    IngestedRow,
    IngestionStats,
    RowStatus,
)

LOGGER = logging.getLogger(__name__)

RowLike = Union[AdRow, Mapping[str, Any]]

_STRIP_CHARS = re.compile(r"[$,]")
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(value: Optional[str]) -> float:
    """Parse a metric cell, returning ``0.0`` for empty or non-numeric text.

    Currency symbols and thousands separators are ignored. Like a spreadsheet
    import, the leading numeric portion of the text is used, so ``"3.2x"``
    parses as ``3.2``.
    """

    if not value:
        return 0.0
    cleaned = _STRIP_CHARS.sub("", str(value)).strip()
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_metrics(row: AdRow) -> AdMetrics:
    return AdMetrics(
        spend=parse_number(row.spend),
        cpa=parse_number(row.cpa),
        roas=parse_number(row.roas),
        impressions=_optional_number(row.impressions),
        clicks=_optional_number(row.clicks),
        conversions=_optional_number(row.conversions),
    )


def _optional_number(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return parse_number(value)


class IngestionPipeline:
    """Turns raw ad rows into status-tagged results and summarises batches."""

    def __init__(self, settings: Optional[IngestionSettings] = None) -> None:
        self._settings = settings or IngestionSettings()

    @property
    def settings(self) -> IngestionSettings:
        return self._settings

    def metrics_are_valid(self, metrics: AdMetrics) -> bool:
        if metrics.spend < 0 or metrics.cpa < 0 or metrics.roas < 0:
            return False
        return metrics.roas <= self._settings.max_roas

    def parse_row(self, row: RowLike) -> IngestedRow:
        """Decode the name, parse metrics, and classify a single row.

        Name decoding is checked first: a row whose name cannot be decoded is
        reported as ``PARSE_ERROR`` even when its metrics are also invalid, in
        which case both diagnostics are recorded.
        """

        ad_row = row if isinstance(row, AdRow) else AdRow.from_mapping(row)
        errors: List[str] = []

        decoded = naming.decode(ad_row.ad_name)
        if decoded is None:
            errors.append(NAME_PARSE_FAILED)

        metrics = parse_metrics(ad_row)
        metrics_ok = self.metrics_are_valid(metrics)
        if not metrics_ok:
            errors.append(METRICS_INVALID)

        if decoded is None:
            status = RowStatus.PARSE_ERROR
        elif not metrics_ok:
            status = RowStatus.VALIDATION_ERROR
        else:
            status = RowStatus.SUCCESS

        if errors:
            LOGGER.debug("Row %r flagged %s: %s", ad_row.ad_name, status.value, "; ".join(errors))

        return IngestedRow(
            raw_name=ad_row.ad_name,
            decoded=decoded,
            metrics=metrics,
            status=status,
            errors=tuple(errors),
        )

    def batch_parse(self, rows: Iterable[RowLike]) -> List[IngestedRow]:
        results = [self.parse_row(row) for row in rows]
        if results:
            LOGGER.info(
                "Parsed %s rows (%.1f%% successful)",
                len(results),
                self.success_rate(results) * 100,
            )
        return results

    @staticmethod
    def success_rate(results: Sequence[IngestedRow]) -> float:
        if not results:
            return 0.0
        successes = sum(1 for result in results if result.status is RowStatus.SUCCESS)
        return successes / len(results)

    def aggregate(self, results: Sequence[IngestedRow]) -> IngestionStats:
        counts = {status: 0 for status in RowStatus}
        for result in results:
            counts[result.status] += 1
        return IngestionStats(
            total=len(results),
            success=counts[RowStatus.SUCCESS],
            parse_errors=counts[RowStatus.PARSE_ERROR],
            validation_errors=counts[RowStatus.VALIDATION_ERROR],
            success_rate=self.success_rate(results),
        )

    @staticmethod
    def deduplicate(results: Iterable[IngestedRow]) -> List[IngestedRow]:
        return deduplicate_rows(results)

    @staticmethod
    def group_by_tags(results: Iterable[IngestedRow]) -> Dict[str, List[IngestedRow]]:
        return group_rows(results, tag_key)
