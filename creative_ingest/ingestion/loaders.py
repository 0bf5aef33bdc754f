"""Utilities for loading ad performance rows from spreadsheets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import (
    AD_NAME,
    CLICKS,
    CONVERSIONS,
    CPA,
    IMPRESSIONS,
    REQUIRED_COLUMNS,
    ROAS,
    SPEND,
    AdRow,
)

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

_COLUMN_SYNONYMS: Mapping[str, Sequence[str]] = {
    AD_NAME: ("ad name", "ad_name", "adname", "name", "creative name"),
    SPEND: ("spend", "amount spent", "cost"),
    CPA: ("cpa", "cost per acquisition", "cost per result"),
    ROAS: ("roas", "purchase roas", "return on ad spend"),
    IMPRESSIONS: ("impressions", "impr"),
    CLICKS: ("clicks", "link clicks"),
    CONVERSIONS: ("conversions", "results", "purchases"),
}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


class MissingColumnError(ValueError):
    """Raised when a sheet lacks a column every ad row needs."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required column(s): {', '.join(self.missing)}")


def load_ad_rows(
    path: PathLike,
    *,
    column_mapping: Optional[Mapping[str, str]] = None,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[AdRow]:
    """Load ad performance rows from a spreadsheet.

    Parameters
    ----------
    path:
        Path to the CSV/TSV/XLSX file to be loaded.
    column_mapping:
        Optional mapping of canonical column names (``"Ad Name"``, ``"Spend"``,
        ...) to the headers used in the file. Unmapped columns are resolved by
        case-insensitive synonyms.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel` when loading an Excel
        file. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    resolved = resolve_columns(dataframe.columns, column_mapping or {})

    missing = [column for column in REQUIRED_COLUMNS if column not in resolved]
    if missing:
        raise MissingColumnError(missing)

    rows: List[AdRow] = []
    for _, record in dataframe.iterrows():
        if _row_is_empty(record):
            continue
        rows.append(AdRow.from_mapping({canonical: record[source] for canonical, source in resolved.items()}))

    LOGGER.info("Loaded %s ad rows from %s", len(rows), path)
    return rows


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    # Cells stay as text so metric parsing sees exactly what the sheet holds.
    loader_kwargs.setdefault("dtype", str)
    loader_kwargs.setdefault("keep_default_na", False)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("encoding", "utf-8-sig")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=engine, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def resolve_columns(available_columns: Iterable[Any], mapping: Mapping[str, str]) -> Dict[str, str]:
    """Map canonical column names to the headers present in a sheet."""

    headers = [str(column) for column in available_columns]
    resolved: Dict[str, str] = {}

    for canonical, synonyms in _COLUMN_SYNONYMS.items():
        if canonical in mapping:
            if mapping[canonical] in headers:
                resolved[canonical] = mapping[canonical]
            continue
        wanted = {canonical.lower(), *synonyms}
        for header in headers:
            if header.strip().lower() in wanted:
                resolved[canonical] = header
                break

    return resolved


def _row_is_empty(row: pd.Series) -> bool:
    return all(pd.isna(value) or (isinstance(value, str) and not value.strip()) for value in row.values)


__all__ = ["load_ad_rows", "resolve_columns", "MissingColumnError", "UnsupportedFileTypeError"]
