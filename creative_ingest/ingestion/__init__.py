"""Utilities for importing ad performance sheets and exporting results."""

from .exporters import export_report, export_results, report_to_dataframe, results_to_dataframe
from .loaders import MissingColumnError, UnsupportedFileTypeError, load_ad_rows, resolve_columns
from .models import AdRow

__all__ = [
    "AdRow",
    "MissingColumnError",
    "UnsupportedFileTypeError",
    "export_report",
    "export_results",
    "load_ad_rows",
    "report_to_dataframe",
    "resolve_columns",
    "results_to_dataframe",
]
