"""Per-tag performance reporting over ingested ad rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import pandas as pd

from .models import METRICS_INVALID, AdMetrics, IngestedRow, RowStatus

LOGGER = logging.getLogger(__name__)

CATEGORIES = ("A1", "A2", "B", "C", "D")
DEFAULT_TOP_LIMIT = 10

_FRAME_COLUMNS = ["raw_name", "status", "metrics_ok", *CATEGORIES, "spend", "revenue", "conversions"]

DateLike = Union[str, date]


@dataclass(frozen=True, slots=True)
class TagPerformance:
    """Totals and ratios for every ad sharing one tag value."""

    category: str
    tag: str
    ad_count: int
    total_spend: float
    total_revenue: float
    total_conversions: float
    avg_cpa: float
    avg_roas: float


@dataclass(frozen=True, slots=True)
class ReportSummary:
    total_ads: int = 0
    total_spend: float = 0.0
    total_revenue: float = 0.0
    overall_roas: float = 0.0
    overall_cpa: float = 0.0


@dataclass(frozen=True, slots=True)
class TopPerformers:
    best_roas: List[TagPerformance] = field(default_factory=list)
    lowest_cpa: List[TagPerformance] = field(default_factory=list)


@dataclass(slots=True)
class TagReport:
    summary: ReportSummary
    by_category: Dict[str, List[TagPerformance]] = field(default_factory=dict)

    def all_tags(self) -> List[TagPerformance]:
        return [entry for category in CATEGORIES for entry in self.by_category.get(category, [])]

    def top_performers(self, limit: int = DEFAULT_TOP_LIMIT) -> TopPerformers:
        """Rank tags by ROAS (highest first) and CPA (lowest first)."""

        entries = self.all_tags()
        best_roas = sorted((e for e in entries if e.avg_roas > 0), key=lambda e: e.avg_roas, reverse=True)
        lowest_cpa = sorted((e for e in entries if e.avg_cpa > 0), key=lambda e: e.avg_cpa)
        return TopPerformers(best_roas=best_roas[:limit], lowest_cpa=lowest_cpa[:limit])


def derived_values(metrics: AdMetrics) -> Tuple[float, float]:
    """Return ``(revenue, conversions)`` implied by a row's metrics.

    Explicit conversion counts win; otherwise conversions are inferred from
    spend and CPA.
    """

    revenue = metrics.spend * metrics.roas
    if metrics.conversions is not None:
        conversions = metrics.conversions
    elif metrics.cpa > 0:
        conversions = metrics.spend / metrics.cpa
    else:
        conversions = 0.0
    return revenue, conversions


def performance_frame(results: Iterable[IngestedRow]) -> pd.DataFrame:
    """Flatten results into one frame row per ingested row."""

    records = []
    for result in results:
        revenue, conversions = derived_values(result.metrics)
        tags = result.decoded.as_dict() if result.decoded is not None else {}
        records.append(
            {
                "raw_name": result.raw_name,
                "status": result.status.value,
                "metrics_ok": METRICS_INVALID not in result.errors,
                **{category: tags.get(category) for category in CATEGORIES},
                "spend": result.metrics.spend,
                "revenue": revenue,
                "conversions": conversions,
            }
        )
    return pd.DataFrame(records, columns=_FRAME_COLUMNS)


def build_report(results: Sequence[IngestedRow]) -> TagReport:
    """Summarise spend and return per tag for a batch of results.

    Only rows with a decoded name and valid metrics contribute to the per-tag
    breakdown. The summary covers every row whose metrics passed validation.
    """

    frame = performance_frame(results)
    summary = _summarise(frame[frame["metrics_ok"].astype(bool)])
    successful = frame[frame["status"] == RowStatus.SUCCESS.value]

    by_category = {category: _aggregate_category(successful, category) for category in CATEGORIES}
    LOGGER.info(
        "Built report for %s rows across %s tags",
        summary.total_ads,
        sum(len(entries) for entries in by_category.values()),
    )
    return TagReport(summary=summary, by_category=by_category)


def _summarise(frame: pd.DataFrame) -> ReportSummary:
    total_spend = float(frame["spend"].sum())
    total_revenue = float(frame["revenue"].sum())
    total_conversions = float(frame["conversions"].sum())
    return ReportSummary(
        total_ads=len(frame),
        total_spend=total_spend,
        total_revenue=total_revenue,
        overall_roas=total_revenue / total_spend if total_spend > 0 else 0.0,
        overall_cpa=total_spend / total_conversions if total_conversions > 0 else 0.0,
    )


def _aggregate_category(frame: pd.DataFrame, category: str) -> List[TagPerformance]:
    tagged = frame[frame[category].notna() & (frame[category] != "")]
    if tagged.empty:
        return []

    grouped = tagged.groupby(category, sort=False).agg(
        ad_count=("raw_name", "size"),
        total_spend=("spend", "sum"),
        total_revenue=("revenue", "sum"),
        total_conversions=("conversions", "sum"),
    )

    entries: List[TagPerformance] = []
    for tag, row in grouped.iterrows():
        spend = float(row["total_spend"])
        revenue = float(row["total_revenue"])
        conversions = float(row["total_conversions"])
        entries.append(
            TagPerformance(
                category=category,
                tag=str(tag),
                ad_count=int(row["ad_count"]),
                total_spend=spend,
                total_revenue=revenue,
                total_conversions=conversions,
                avg_cpa=spend / conversions if conversions > 0 else 0.0,
                avg_roas=revenue / spend if spend > 0 else 0.0,
            )
        )
    return entries


# --- Filters ---

def filter_by_date_range(results: Iterable[IngestedRow], start: DateLike, end: DateLike) -> List[IngestedRow]:
    """Keep rows dated within ``[start, end]``; undated rows are kept."""

    start_day, end_day = _as_date(start), _as_date(end)
    kept: List[IngestedRow] = []
    for result in results:
        if result.decoded is None or result.decoded.date is None:
            kept.append(result)
            continue
        if start_day <= date.fromisoformat(result.decoded.date) <= end_day:
            kept.append(result)
    return kept


def filter_by_roas(results: Iterable[IngestedRow], minimum: float) -> List[IngestedRow]:
    return [result for result in results if result.metrics.roas >= minimum]


def filter_by_cpa(results: Iterable[IngestedRow], maximum: float) -> List[IngestedRow]:
    """Keep rows with a positive CPA no higher than ``maximum``."""
    return [result for result in results if 0 < result.metrics.cpa <= maximum]


def _as_date(value: DateLike) -> date:
    return value if isinstance(value, date) else datetime.strptime(value, "%Y-%m-%d").date()


__all__ = [
    "CATEGORIES",
    "ReportSummary",
    "TagPerformance",
    "TagReport",
    "TopPerformers",
    "build_report",
    "derived_values",
    "filter_by_cpa",
    "filter_by_date_range",
    "filter_by_roas",
    "performance_frame",
]
