from __future__ import annotations

import re
from pathlib import Path

import pandas as pd

from ..models.conversion_result import ConversionResult

"""Result workbook layout and writing.

Sheets (in order): Data, Validation, Store Summary and, only when at least one
store name could not be mapped, Mapping Failures.
"""

__all__ = [
    "DATA_SHEET",
    "VALIDATION_SHEET",
    "STORE_SUMMARY_SHEET",
    "MAPPING_FAILURES_SHEET",
    "RESULT_SUFFIX",
    "output_file_name",
    "build_result_frames",
    "write_result_workbook",
]

DATA_SHEET = "Data"
VALIDATION_SHEET = "Validation"
STORE_SUMMARY_SHEET = "Store Summary"
MAPPING_FAILURES_SHEET = "Mapping Failures"

DATA_COLUMNS = ["Date", "Code", "Store Name", "Product Name", "Box Qty", "Afternoon Display"]
VALIDATION_COLUMNS = [
    "Date",
    "Day",
    "Extracted Box Total",
    "Original Sheet Total",
    "Original Store Sum",
    "Result",
]
STORE_SUMMARY_COLUMNS = ["Date", "Code", "Store Name", "Box Total"]
MAPPING_FAILURES_COLUMNS = ["Store Name"]

RESULT_SUFFIX = "_result.xlsx"
_EXCEL_EXT = re.compile(r"\.xlsx?$", re.IGNORECASE)


def output_file_name(origin_name: str, suffix: str = RESULT_SUFFIX) -> str:
    """Origin file name with its .xls/.xlsx extension replaced by ``suffix``.

    A name without a spreadsheet extension gets the suffix appended so the
    origin file is never overwritten.
    """
    if _EXCEL_EXT.search(origin_name):
        return _EXCEL_EXT.sub(suffix, origin_name)
    return origin_name + suffix


def build_result_frames(result: ConversionResult) -> dict[str, pd.DataFrame]:
    """Return the output sheets as DataFrames keyed by sheet name (insertion order = sheet order)."""
    frames: dict[str, pd.DataFrame] = {}
    frames[DATA_SHEET] = pd.DataFrame(
        [
            [r.date, r.code, r.display_name, r.product_name, r.box_qty, r.secondary_text]
            for r in result.records
        ],
        columns=DATA_COLUMNS,
    )
    frames[VALIDATION_SHEET] = pd.DataFrame(
        [
            [
                v.date,
                v.day_name,
                v.extracted_sum,
                v.original_total,
                v.original_store_sum,
                v.match_result.label,
            ]
            for v in result.validation
        ],
        columns=VALIDATION_COLUMNS,
    )
    frames[STORE_SUMMARY_SHEET] = pd.DataFrame(
        [[s.date, s.code, s.display_name, s.box_sum] for s in result.store_daily],
        columns=STORE_SUMMARY_COLUMNS,
    )
    if result.mapping_failures:
        frames[MAPPING_FAILURES_SHEET] = pd.DataFrame(
            [[name] for name in result.mapping_failures],
            columns=MAPPING_FAILURES_COLUMNS,
        )
    return frames


def write_result_workbook(result: ConversionResult, path: Path) -> Path:
    frames = build_result_frames(result)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return path
