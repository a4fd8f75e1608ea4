from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..excel.grid import SheetGrid, cell_to_int, cell_to_text
from ..models.block import COLUMN_FAMILIES, ColumnFamily
from ..models.records import DailyRecord, MatchResult, MatchStatus, ValidationRow
from .block_locator import DEFAULT_FAMILIES

"""Reconciliation of extracted totals against totals already in the sheet.

Two sheet-native figures are read per weekday sheet:
- original total: the fixed total cell (F8)
- original store sum: every per-store subtotal row (sequence column == "계")
  from row 35 downward, summed over all column families

``families`` defaults to all three column families (A, B and C), so a
subtotal in the C family counts too. Pass ``(ColumnFamily.A, ColumnFamily.B)``
to scan only the first two.

Classification uses the store sum; the fixed total is reported alongside it.
The subtotal scan assumes "계" never appears in the sequence column of a
product row.
"""

__all__ = [
    "TOTAL_CELL",
    "STORE_SUM_START_ROW",
    "SUM_MARKER",
    "original_total",
    "original_store_sum",
    "extracted_sum",
    "classify",
    "build_validation_row",
]

TOTAL_CELL: tuple[int, int] = (8, 6)  # F8
STORE_SUM_START_ROW = 35
SUM_MARKER = "계"


def original_total(grid: SheetGrid, cell: tuple[int, int] = TOTAL_CELL) -> int:
    return cell_to_int(grid.cell(*cell)) or 0


def original_store_sum(
    grid: SheetGrid,
    families: Sequence[ColumnFamily] = DEFAULT_FAMILIES,
    start_row: int = STORE_SUM_START_ROW,
    marker: str = SUM_MARKER,
) -> int:
    total = 0
    max_row, _ = grid.occupied_range()
    for row in range(start_row, max_row + 1):
        for family in families:
            offsets = COLUMN_FAMILIES[family]
            if cell_to_text(grid.cell(row, offsets.sequence_no)) != marker:
                continue
            qty = cell_to_int(grid.cell(row, offsets.box_qty)) or 0
            if qty > 0:
                total += qty
    return total


def extracted_sum(records: Iterable[DailyRecord], date_str: str) -> int:
    return sum(r.box_qty for r in records if r.date == date_str)


def classify(extracted: int, store_sum: int) -> MatchResult:
    if store_sum > 0:
        if extracted == store_sum:
            return MatchResult(MatchStatus.MATCH)
        return MatchResult(MatchStatus.MISMATCH, diff=extracted - store_sum)
    return MatchResult(MatchStatus.NO_ORIGINAL_DATA)


def build_validation_row(
    date_str: str,
    day_name: str,
    records: Iterable[DailyRecord],
    total: int,
    store_sum: int,
) -> ValidationRow:
    extracted = extracted_sum(records, date_str)
    return ValidationRow(
        date=date_str,
        day_name=day_name,
        extracted_sum=extracted,
        original_total=total,
        original_store_sum=store_sum,
        match_result=classify(extracted, store_sum),
    )
