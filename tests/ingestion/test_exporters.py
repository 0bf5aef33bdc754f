import pandas as pd
import pytest

from creative_ingest.ingestion.exporters import (
    export_report,
    export_results,
    report_to_dataframe,
    results_to_dataframe,
)
from creative_ingest.ingestion.loaders import UnsupportedFileTypeError
from creative_ingest.pipeline import IngestionPipeline
from creative_ingest.report import build_report
from creative_ingest.state_router import StateRouter


def _build_sample_results():
    return IngestionPipeline().batch_parse(
        [
            {"Ad Name": "20251205_Product_Unboxing_Walk_Indoor_D001", "Spend": "1500", "CPA": "25", "ROAS": "3.2"},
            {"Ad Name": "20251206_Product_Unboxing_Lift_Indoor_D002", "Spend": "100", "CPA": "10", "ROAS": "150"},
            {"Ad Name": "20251207_Product_Unboxing_Jump_Indoor_D003", "Spend": "10", "CPA": "1", "ROAS": "1",
             "Clicks": "40"},
            {"Ad Name": "broken", "Spend": "1", "CPA": "1", "ROAS": "1"},
        ]
    )


def test_results_to_dataframe_flattens_rows():
    dataframe = results_to_dataframe(_build_sample_results(), state_router=StateRouter())

    required_columns = {"ad_name", "status", "date", "A1", "B", "fold_state", "spend", "roas", "errors"}
    assert required_columns.issubset(dataframe.columns)
    assert list(dataframe["status"]) == ["SUCCESS", "VALIDATION_ERROR", "SUCCESS", "PARSE_ERROR"]
    fold_states = [None if pd.isna(state) else state for state in dataframe["fold_state"]]
    assert fold_states == ["UNFOLDED", "FOLDED", None, None]
    assert dataframe.loc[0, "date"] == "2025-12-05"
    assert dataframe.loc[1, "errors"] == "metrics invalid"
    assert dataframe.loc[2, "clicks"] == 40
    assert pd.isna(dataframe.loc[3, "A1"])


def test_results_to_dataframe_without_router_omits_fold_state():
    dataframe = results_to_dataframe(_build_sample_results())

    assert "fold_state" not in dataframe.columns


def test_results_to_dataframe_empty_keeps_header():
    dataframe = results_to_dataframe([])

    assert dataframe.empty
    assert "ad_name" in dataframe.columns


def test_export_results_to_csv_and_excel(tmp_path):
    results = _build_sample_results()

    csv_path = tmp_path / "out" / "results.csv"
    excel_path = tmp_path / "results.xlsx"

    export_results(results, csv_path)
    export_results(results, excel_path)

    csv_frame = pd.read_csv(csv_path)
    excel_frame = pd.read_excel(excel_path)

    assert csv_frame.loc[0, "ad_name"] == "20251205_Product_Unboxing_Walk_Indoor_D001"
    assert csv_frame.loc[3, "errors"] == "name parse failed"
    assert excel_frame.loc[0, "spend"] == 1500


def test_export_report(tmp_path):
    report = build_report(_build_sample_results())

    frame = report_to_dataframe(report)
    assert list(frame.columns) == ["category", "tag", "ad_count", "spend", "revenue", "conversions", "cpa", "roas"]
    product = frame[(frame["category"] == "A1") & (frame["tag"] == "Product")].iloc[0]
    assert product["ad_count"] == 2

    path = export_report(report, tmp_path / "tags.csv")
    written = pd.read_csv(path)
    assert len(written) == len(frame)


@pytest.mark.parametrize("filename", ["results.json", "results.xls", "results"])
def test_export_rejects_unsupported_extension(tmp_path, filename):
    with pytest.raises(UnsupportedFileTypeError, match="Unsupported export file extension"):
        export_results(_build_sample_results(), tmp_path / "out" / filename)

    assert not (tmp_path / "out").exists()
