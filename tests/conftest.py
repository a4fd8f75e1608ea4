# Shared pytest fixtures: temp workdir + weekly/mapping workbook builders
from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from delivery_converter.excel.grid import SheetGrid
from delivery_converter.logging.init import APP_LOGGER_NAME, reset_logging
from delivery_converter.models.block import COLUMN_FAMILIES, ColumnFamily

ORIGIN_NAME = "간식서비스 26년 1월 3주차 (1.12~1.16).xlsx"
MAPPING_HEADER = ["코드", "원본 사업장명", "사업장명"]

_AUTO = object()


class WeekSheet:
    """Weekday sheet builder using workbook coordinates (1-indexed).

    Blocks follow the fixed layout: anchor ``※ name : n`` in the sequence
    column, header rows below it, product rows from anchor + 4 and an
    optional "계" subtotal row right after the products.
    """

    def __init__(self, total: int | None = None, title: str = "간식서비스 주간 배송표") -> None:
        self.cells: dict[tuple[int, int], Any] = {(1, 1): title}
        if total is not None:
            self.cells[(8, 6)] = total

    def set(self, row: int, col: int, value: Any) -> WeekSheet:
        self.cells[(row, col)] = value
        return self

    def add_block(
        self,
        family: ColumnFamily,
        anchor_row: int,
        store: str,
        products: list[tuple[Any, ...]],
        subtotal: Any = _AUTO,
    ) -> int:
        """Add a block; ``products`` items are (seq, name, qty) or (seq, name, qty, afternoon).

        Returns the first row after the block.
        """
        offsets = COLUMN_FAMILIES[family]
        self.set(anchor_row, offsets.sequence_no, f"※ {store} : {len(products)}")
        self.set(anchor_row + 2, offsets.sequence_no, "No.")
        self.set(anchor_row + 2, offsets.product_name, "품목명")
        self.set(anchor_row + 2, offsets.box_qty, "Box")
        row = anchor_row + 4
        auto_sum = 0
        for item in products:
            seq, name, qty = item[:3]
            self.set(row, offsets.sequence_no, seq)
            self.set(row, offsets.product_name, name)
            self.set(row, offsets.box_qty, qty)
            if len(item) > 3:
                self.set(row, offsets.secondary, item[3])
            if isinstance(qty, int) and qty > 0 and name:
                auto_sum += qty
            row += 1
        if subtotal is not None:
            self.set(row, offsets.sequence_no, "계")
            self.set(row, offsets.box_qty, auto_sum if subtotal is _AUTO else subtotal)
            row += 1
        return row

    def rows(self) -> list[list[Any]]:
        max_row = max(r for r, _ in self.cells)
        max_col = max(c for _, c in self.cells)
        rows: list[list[Any]] = [[None] * max_col for _ in range(max_row)]
        for (r, c), value in self.cells.items():
            rows[r - 1][c - 1] = value
        return rows

    def grid(self, name: str = "월") -> SheetGrid:
        return SheetGrid.from_rows(name, self.rows())


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Write header-less sheets (row lists) to a real xlsx file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows, dtype=object).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


def write_mapping(path: Path, rows: list[list[Any]], header: list[str] | None = None) -> Path:
    return write_workbook(path, {"매핑": [header or MAPPING_HEADER, *rows]})


@pytest.fixture(autouse=True)
def _fresh_logging():
    # ハンドラが前テストの stdout (capsys) を掴まないように前後で初期化
    _drop_app_handlers()
    yield
    _drop_app_handlers()


def _drop_app_handlers() -> None:
    reset_logging()
    for name in (APP_LOGGER_NAME, "py.warnings"):
        target = logging.getLogger(name)
        for handler in target.handlers[:]:
            target.removeHandler(handler)
        target.propagate = True


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def week_sheet():
    """Factory for WeekSheet builders."""
    return WeekSheet


@pytest.fixture()
def monday_sheet() -> WeekSheet:
    """Two stores side by side (A, B) plus one store below (A), total 23."""
    sheet = WeekSheet(total=23)
    sheet.add_block(ColumnFamily.A, 31, "본사 1층", [(1, "바나나우유", 5, "O"), (2, "초코파이", 3)])
    sheet.add_block(ColumnFamily.B, 31, "Downtown Store", [(1, "새우깡", 4)])
    sheet.add_block(ColumnFamily.A, 40, "물류센터", [(1, "컵라면", 6), (2, "삼각김밥", 5)])
    return sheet


@pytest.fixture()
def tuesday_sheet() -> WeekSheet:
    sheet = WeekSheet(total=9)
    sheet.add_block(ColumnFamily.C, 31, "Downtown Store", [(1, "포카리스웨트", 2)])
    sheet.add_block(ColumnFamily.A, 31, "본사 1층", [(1, "바나나우유", 7)])
    return sheet


@pytest.fixture()
def mapping_rows() -> list[list[Any]]:
    return [
        [1001, "본사 1층", "본사"],
        ["L-02", "물류센터", "물류센터 (평택)"],
    ]


@pytest.fixture()
def origin_workbook(temp_workdir: Path, monday_sheet: WeekSheet, tuesday_sheet: WeekSheet) -> Path:
    return write_workbook(
        temp_workdir / "data" / ORIGIN_NAME,
        {"월": monday_sheet.rows(), "화": tuesday_sheet.rows(), "메모": [["참고용 시트"]]},
    )


@pytest.fixture()
def mapping_workbook(temp_workdir: Path, mapping_rows: list[list[Any]]) -> Path:
    return write_mapping(temp_workdir / "data" / "mapping.xlsx", mapping_rows)


@pytest.fixture()
def make_workbook():
    """write_workbook(path, {sheet: rows}) as a fixture."""
    return write_workbook


@pytest.fixture()
def make_mapping():
    """write_mapping(path, rows, header=None) as a fixture."""
    return write_mapping
