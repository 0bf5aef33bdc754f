"""Command line interface for ingesting ad performance sheets."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigurationError, load_settings
from .ingestion import MissingColumnError, UnsupportedFileTypeError, export_report, export_results, load_ad_rows
from .pipeline import IngestionPipeline
from .report import build_report
from .state_router import DuplicateActionError, StateRouter


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Decode creative names and validate ad metrics from a spreadsheet",
    )
    parser.add_argument("input", help="Path to the input spreadsheet (CSV, TSV or XLSX)")
    parser.add_argument("output", help="Path where the parsed rows should be written")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--report",
        default=None,
        help="Optional path for the per-tag performance report",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Drop rows whose ad name was already seen earlier in the sheet",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        settings = load_settings(args.config)
        rows = load_ad_rows(args.input, column_mapping=settings.column_mapping)
    except (ConfigurationError, MissingColumnError, UnsupportedFileTypeError, FileNotFoundError) as exc:
        logging.error("%s", exc)
        return 1

    pipeline = IngestionPipeline(settings)
    results = pipeline.batch_parse(rows)
    if args.dedupe or settings.deduplicate:
        results = pipeline.deduplicate(results)

    try:
        export_results(results, args.output, state_router=StateRouter.from_settings(settings))
        if args.report:
            export_report(build_report(results), args.report)
    except (ConfigurationError, DuplicateActionError, UnsupportedFileTypeError) as exc:
        logging.error("%s", exc)
        return 1

    stats = pipeline.aggregate(results)
    logging.info(
        "Processed %s rows: %s succeeded, %s parse errors, %s validation errors",
        stats.total,
        stats.success,
        stats.parse_errors,
        stats.validation_errors,
    )
    logging.info("Results written to %s", Path(args.output).resolve())

    if args.report:
        logging.info("Tag report written to %s", Path(args.report).resolve())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
