from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from delivery_converter.excel.writer import (
    DATA_SHEET,
    MAPPING_FAILURES_SHEET,
    STORE_SUMMARY_SHEET,
    VALIDATION_SHEET,
    build_result_frames,
    output_file_name,
    write_result_workbook,
)
from delivery_converter.models.conversion_result import ConversionResult
from delivery_converter.models.records import (
    DailyRecord,
    MatchResult,
    MatchStatus,
    StoreDailyAggregate,
    ValidationRow,
)


@pytest.mark.parametrize(
    "origin, expected",
    [
        ("week.xlsx", "week_result.xlsx"),
        ("week.XLS", "week_result.xlsx"),
        ("간식 (1.12~1.16).xlsx", "간식 (1.12~1.16)_result.xlsx"),
        ("week.xlsx.bak", "week.xlsx.bak_result.xlsx"),
        ("week", "week_result.xlsx"),
    ],
)
def test_output_file_name(origin, expected):
    assert output_file_name(origin) == expected


def _result(failures: list[str]) -> ConversionResult:
    return ConversionResult(
        records=[DailyRecord("2026-01-12", "1001", "본사", "바나나우유", 5, "O")],
        validation=[ValidationRow("2026-01-12", "월", 5, 6, 5, MatchResult(MatchStatus.MATCH))],
        store_daily=[StoreDailyAggregate("2026-01-12", "1001", "본사", 5)],
        mapping_failures=failures,
    )


def test_build_result_frames_without_failures():
    frames = build_result_frames(_result([]))

    assert list(frames) == [DATA_SHEET, VALIDATION_SHEET, STORE_SUMMARY_SHEET]
    assert frames[DATA_SHEET].iloc[0].tolist() == ["2026-01-12", "1001", "본사", "바나나우유", 5, "O"]
    assert frames[VALIDATION_SHEET].iloc[0].tolist() == ["2026-01-12", "월", 5, 6, 5, "Match"]
    assert frames[STORE_SUMMARY_SHEET].iloc[0].tolist() == ["2026-01-12", "1001", "본사", 5]


def test_build_result_frames_with_failures():
    frames = build_result_frames(_result(["Downtown Store", "신관"]))

    assert list(frames)[-1] == MAPPING_FAILURES_SHEET
    assert frames[MAPPING_FAILURES_SHEET]["Store Name"].tolist() == ["Downtown Store", "신관"]


def test_empty_result_still_has_headers():
    frames = build_result_frames(ConversionResult([], [], [], []))
    assert frames[DATA_SHEET].columns.tolist() == [
        "Date", "Code", "Store Name", "Product Name", "Box Qty", "Afternoon Display",
    ]
    assert frames[DATA_SHEET].empty


def test_write_result_workbook(tmp_path: Path):
    path = write_result_workbook(_result(["Downtown Store"]), tmp_path / "out" / "week_result.xlsx")

    assert path.exists()
    with pd.ExcelFile(path) as xls:
        assert xls.sheet_names == [DATA_SHEET, VALIDATION_SHEET, STORE_SUMMARY_SHEET, MAPPING_FAILURES_SHEET]
        data = xls.parse(DATA_SHEET, dtype={"Code": str})
    assert data["Product Name"].tolist() == ["바나나우유"]
    assert data["Code"].tolist() == ["1001"]
