from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

import numpy as np
import pandas as pd

from ..excel.grid import cell_to_int, cell_to_text
from ..models.block import COLUMN_FAMILIES, BlockDescriptor, ColumnFamily, ProductLine
from ..models.conversion_result import ConversionResult, SheetStat
from ..models.records import DailyRecord, MappingEntry
from .aggregator import aggregate_store_daily, to_daily_records, unique_failure_names
from .block_locator import DEFAULT_FAMILIES, extract_store_name, find_store_blocks
from .date_resolver import DEFAULT_BASE_DATE, WEEKDAY_LABELS, resolve_base_date, weekday_dates
from .name_mapper import NameMapper
from .product_extractor import DEFAULT_MAX_PRODUCTS, HEADER_ROWS, extract_products
from .reconciler import (
    STORE_SUM_START_ROW,
    SUM_MARKER,
    TOTAL_CELL,
    build_validation_row,
    original_store_sum,
    original_total,
)

logger = logging.getLogger(__name__)

"""Conversion backends.

Both backends compute the same pure function

    weekday grids + mapping table + origin file name -> ConversionResult

and must produce equal records / validation rows / aggregates / failures.

- ReferenceBackend: walks the grid cell by cell through the extraction services
- VectorizedBackend: works on the pandas DataFrame behind each grid with
  column-wise operations; unavailable for grids without a DataFrame or when
  DISABLE_VECTORIZED=1
"""

__all__ = [
    "BackendUnavailableError",
    "ConversionSettings",
    "ReferenceBackend",
    "VectorizedBackend",
    "BACKENDS",
    "get_backend",
]

# 整数として解釈できないセルの番兵 (int64 配列に None を混ぜないため)
_MISSING = np.iinfo(np.int64).min


class BackendUnavailableError(Exception):
    """Raised when a backend cannot run on the given inputs."""


class SheetProgress(Protocol):
    def sheet_done(self, stat: SheetStat) -> None: ...


@dataclass(frozen=True)
class ConversionSettings:
    """Layout / run parameters shared by both backends."""
    default_date: date = DEFAULT_BASE_DATE
    max_products: int = DEFAULT_MAX_PRODUCTS
    weekday_labels: tuple[str, ...] = WEEKDAY_LABELS
    families: tuple[ColumnFamily, ...] = field(default=DEFAULT_FAMILIES)


class ReferenceBackend:
    """Cell-by-cell implementation on top of the extraction services."""

    name = "reference"

    def check_available(self, sheets: Mapping[str, Any]) -> None:
        return None

    # --- per-sheet primitives (overridden by VectorizedBackend) ---
    def locate_blocks(self, grid: Any, families: Sequence[ColumnFamily]) -> list[BlockDescriptor]:
        return find_store_blocks(grid, families)

    def extract_block(self, grid: Any, block: BlockDescriptor, max_products: int) -> list[ProductLine]:
        return extract_products(grid, block, max_products)

    def sheet_total(self, grid: Any) -> int:
        return original_total(grid)

    def sheet_store_sum(self, grid: Any, families: Sequence[ColumnFamily]) -> int:
        return original_store_sum(grid, families)

    def convert(
        self,
        sheets: Mapping[str, Any],
        mapping: Mapping[str, MappingEntry],
        file_name: str,
        settings: ConversionSettings | None = None,
        progress: SheetProgress | None = None,
    ) -> ConversionResult:
        """Run the whole conversion on already materialized inputs."""
        settings = settings or ConversionSettings()
        self.check_available(sheets)

        base = resolve_base_date(file_name, settings.default_date)
        dates = weekday_dates(base, settings.weekday_labels)
        mapper = NameMapper(dict(mapping))

        records: list[DailyRecord] = []
        present: list[tuple[str, str, Any]] = []
        stats: list[SheetStat] = []
        # 曜日ラベル順に処理 (存在しないシートは黙ってスキップ)
        for day_name, day in dates.items():
            grid = sheets.get(day_name)
            if grid is None:
                continue
            date_str = day.isoformat()
            blocks = self.locate_blocks(grid, settings.families)
            before = len(records)
            for block in blocks:
                identity = mapper.resolve(block.store_name, day_name, block.anchor_row)
                lines = self.extract_block(grid, block, settings.max_products)
                records.extend(to_daily_records(date_str, identity, lines))
            logger.debug(
                "sheet=%s date=%s blocks=%d rows=%d backend=%s",
                day_name, date_str, len(blocks), len(records) - before, self.name,
            )
            present.append((day_name, date_str, grid))
            stat = SheetStat(day_name=day_name, date=date_str, blocks=len(blocks), extracted_rows=len(records) - before)
            stats.append(stat)
            if progress is not None:
                progress.sheet_done(stat)

        # 検証は全抽出完了後に計算
        validation = [
            build_validation_row(
                date_str,
                day_name,
                records,
                self.sheet_total(grid),
                self.sheet_store_sum(grid, settings.families),
            )
            for day_name, date_str, grid in present
        ]
        return ConversionResult(
            records=records,
            validation=validation,
            store_daily=aggregate_store_daily(records),
            mapping_failures=unique_failure_names(mapper.failures),
            backend=self.name,
            sheet_stats=stats,
            failure_events=mapper.failures,
        )


def _int_or_missing(value: Any) -> int:
    parsed = cell_to_int(value)
    return _MISSING if parsed is None else parsed


def _segment(frame: pd.DataFrame, col: int, start: int, stop: int) -> pd.Series:
    """Column ``col`` (1-indexed) rows [start, stop) (0-indexed); all-None when the column is absent."""
    if col > frame.shape[1]:
        return pd.Series([None] * max(0, stop - start), dtype=object)
    return frame.iloc[start:stop, col - 1]


class VectorizedBackend(ReferenceBackend):
    """Column-wise implementation on the DataFrame behind each grid."""

    name = "vectorized"

    @staticmethod
    def _frame(grid: Any) -> pd.DataFrame:
        frame = getattr(grid, "frame", None)
        if not isinstance(frame, pd.DataFrame):
            raise BackendUnavailableError(f"grid '{getattr(grid, 'name', '?')}' is not DataFrame backed")
        return frame

    def check_available(self, sheets: Mapping[str, Any]) -> None:
        if os.getenv("DISABLE_VECTORIZED") == "1":
            raise BackendUnavailableError("vectorized backend disabled via DISABLE_VECTORIZED=1")
        for grid in sheets.values():
            self._frame(grid)

    def locate_blocks(self, grid: Any, families: Sequence[ColumnFamily]) -> list[BlockDescriptor]:
        frame = self._frame(grid)
        found: list[tuple[int, int, str, ColumnFamily]] = []
        for order, family in enumerate(families):
            anchors = _segment(frame, COLUMN_FAMILIES[family].anchor, 0, frame.shape[0])
            names = anchors.map(extract_store_name)
            for pos in np.flatnonzero(names.notna().to_numpy()):
                found.append((int(pos) + 1, order, names.iat[pos], family))
        found.sort(key=lambda t: (t[0], t[1]))
        return [BlockDescriptor.for_family(name, row, family) for row, _, name, family in found]

    def extract_block(self, grid: Any, block: BlockDescriptor, max_products: int) -> list[ProductLine]:
        frame = self._frame(grid)
        start = block.anchor_row + HEADER_ROWS - 1
        stop = min(start + max_products, frame.shape[0])
        if start >= stop:
            return []

        seq = _segment(frame, block.col_sequence_no, start, stop).map(_int_or_missing).to_numpy()
        invalid = seq == _MISSING
        end = int(np.argmax(invalid)) if invalid.any() else len(seq)
        if end == 0:
            return []
        stop = start + end

        names = _segment(frame, block.col_product_name, start, stop).map(cell_to_text).to_numpy(dtype=object)
        qty = _segment(frame, block.col_box_qty, start, stop).map(lambda v: cell_to_int(v) or 0).to_numpy()
        secondary = _segment(frame, block.col_secondary, start, stop).map(cell_to_text).to_numpy(dtype=object)
        keep = (names != "") & (qty > 0)
        return [
            ProductLine(
                store_name=block.store_name,
                product_name=str(names[i]),
                box_qty=int(qty[i]),
                secondary_text=str(secondary[i]),
            )
            for i in np.flatnonzero(keep)
        ]

    def sheet_total(self, grid: Any) -> int:
        frame = self._frame(grid)
        row, col = TOTAL_CELL
        if row > frame.shape[0] or col > frame.shape[1]:
            return 0
        return cell_to_int(frame.iat[row - 1, col - 1]) or 0

    def sheet_store_sum(self, grid: Any, families: Sequence[ColumnFamily]) -> int:
        frame = self._frame(grid)
        start = STORE_SUM_START_ROW - 1
        stop = frame.shape[0]
        if start >= stop:
            return 0
        total = 0
        for family in families:
            offsets = COLUMN_FAMILIES[family]
            is_sum_row = (_segment(frame, offsets.sequence_no, start, stop).map(cell_to_text) == SUM_MARKER).to_numpy()
            qty = _segment(frame, offsets.box_qty, start, stop).map(lambda v: cell_to_int(v) or 0).to_numpy()
            total += int(qty[is_sum_row & (qty > 0)].sum())
        return total


BACKENDS: dict[str, type[ReferenceBackend]] = {
    ReferenceBackend.name: ReferenceBackend,
    VectorizedBackend.name: VectorizedBackend,
}


def get_backend(name: str) -> ReferenceBackend:
    try:
        return BACKENDS[name]()
    except KeyError as e:
        raise ValueError(f"unknown backend: {name}") from e
