"""Export utilities for ingested ad rows and tag reports."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import IngestedRow
from ..report import CATEGORIES, TagReport
from ..state_router import StateRouter
from .loaders import UnsupportedFileTypeError

PathLike = Union[str, Path]

_CSV_SUFFIXES = {".csv", ".tsv"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def export_results(
    results: Sequence[IngestedRow],
    path: PathLike,
    *,
    state_router: Optional[StateRouter] = None,
    sheet_name: str = "Results",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write ingested rows to a CSV or Excel file."""

    dataframe = results_to_dataframe(results, state_router=state_router)
    output_path = Path(path)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def results_to_dataframe(
    results: Sequence[IngestedRow],
    *,
    state_router: Optional[StateRouter] = None,
) -> pd.DataFrame:
    """Convert ingested rows into a :class:`pandas.DataFrame`."""

    records = [_result_to_row(result, state_router=state_router) for result in results]
    columns = ["ad_name", "status", "date", *CATEGORIES]
    if state_router is not None:
        columns.append("fold_state")
    columns += ["spend", "cpa", "roas", "impressions", "clicks", "conversions", "errors"]
    return pd.DataFrame(records, columns=columns)


def _result_to_row(
    result: IngestedRow,
    *,
    state_router: Optional[StateRouter],
) -> MutableMapping[str, object]:
    decoded = result.decoded.as_dict() if result.decoded is not None else {}
    row: MutableMapping[str, object] = {
        "ad_name": result.raw_name,
        "status": result.status.value,
        "date": decoded.get("date"),
        **{category: decoded.get(category) for category in CATEGORIES},
        "spend": result.metrics.spend,
        "cpa": result.metrics.cpa,
        "roas": result.metrics.roas,
        "impressions": result.metrics.impressions,
        "clicks": result.metrics.clicks,
        "conversions": result.metrics.conversions,
        "errors": _join_list(result.errors),
    }

    if state_router is not None:
        state = state_router.classify(result.decoded.b) if result.decoded is not None else None
        row["fold_state"] = state.value if state is not None else None

    return row


def report_to_dataframe(report: TagReport) -> pd.DataFrame:
    """Flatten a tag report into one row per (category, tag) pair."""

    records = [
        {
            "category": entry.category,
            "tag": entry.tag,
            "ad_count": entry.ad_count,
            "spend": round(entry.total_spend, 2),
            "revenue": round(entry.total_revenue, 2),
            "conversions": round(entry.total_conversions, 2),
            "cpa": round(entry.avg_cpa, 2),
            "roas": round(entry.avg_roas, 2),
        }
        for entry in report.all_tags()
    ]
    return pd.DataFrame(
        records,
        columns=["category", "tag", "ad_count", "spend", "revenue", "conversions", "cpa", "roas"],
    )


def export_report(
    report: TagReport,
    path: PathLike,
    *,
    sheet_name: str = "Tags",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write the per-tag breakdown of ``report`` to a CSV or Excel file."""

    output_path = Path(path)
    _write_dataframe(report_to_dataframe(report), output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def _join_list(values: Iterable[Optional[str]]) -> str:
    cleaned: List[str] = []
    for value in values:
        if not value:
            continue
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return "; ".join(cleaned)


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()
    if suffix not in _CSV_SUFFIXES | _EXCEL_SUFFIXES:
        raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in _CSV_SUFFIXES:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    engine = exporter_kwargs.pop("engine", None) or "openpyxl"
    dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)


__all__ = ["export_report", "export_results", "report_to_dataframe", "results_to_dataframe"]
