from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.records import MappingEntry
from .grid import SheetGrid, cell_to_text

"""Workbook reading.

Origin workbook: every sheet is read header-less (``header=None``) so the grid
keeps the workbook coordinates; block layout is resolved later by the
extraction services.

Mapping workbook: first sheet only, first row is the header row. Rows with an
empty original store name are ignored.
"""

__all__ = [
    "WorkbookReadError",
    "SheetHeaderError",
    "MissingColumnsError",
    "MAPPING_ORIGINAL_COLUMN",
    "MAPPING_CODE_COLUMN",
    "MAPPING_NAME_COLUMN",
    "read_excel_file",
    "normalize_mapping_sheet",
    "read_mapping_table",
]

MAPPING_ORIGINAL_COLUMN = "원본 사업장명"
MAPPING_CODE_COLUMN = "코드"
MAPPING_NAME_COLUMN = "사업장명"


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or parsed."""

class SheetHeaderError(Exception):
    """Raised when the mapping sheet has no header row."""

class MissingColumnsError(Exception):
    """Raised when expected columns are missing in the mapping sheet header."""


def read_excel_file(
    path: Path, target_sheets: Iterable[str] | None = None, keep_na_strings: list[str] | None = None
) -> dict[str, SheetGrid]:
    """Read a workbook returning raw grids keyed by sheet name.

    Parameters
    ----------
    path: Excel ファイルパス
    target_sheets: 対象シート制限 (None なら全シート)
    keep_na_strings: Pandasの既定NaN変換から除外する文字列リスト (例: 商品名 'NA')
    """
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        # 既定のNA値から keep_na_strings を除外 (空セルは引き続き NaN)
        default_na = parsers.STR_NA_VALUES.copy()
        custom_na = default_na - set(keep_na_strings)
        na_values: list[str] | None = list(custom_na)
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    wanted = set(target_sheets) if target_sheets is not None else None
    grids: dict[str, SheetGrid] = {}
    try:
        with pd.ExcelFile(path) as xls:
            for name in xls.sheet_names:
                if wanted is not None and str(name) not in wanted:
                    continue
                df = xls.parse(name, header=None, keep_default_na=keep_default_na, na_values=na_values)
                grids[str(name)] = SheetGrid(name=str(name), frame=df)
    except FileNotFoundError as e:
        raise WorkbookReadError(f"file not found: {path}") from e
    except Exception as e:
        raise WorkbookReadError(f"cannot read workbook '{Path(path).name}': {e}") from e
    return grids


def normalize_mapping_sheet(df: pd.DataFrame, sheet_name: str) -> dict[str, MappingEntry]:
    """Build the mapping table from a raw (header-less) DataFrame.

    Steps:
    1. Validate that a header row exists
    2. Locate the original-name / code / canonical-name columns by header text
    3. Every later row with a non-empty original name becomes a MappingEntry
       (a later duplicate key replaces the earlier one)
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    columns = [cell_to_text(c) for c in df.iloc[0].tolist()]
    expected = {MAPPING_ORIGINAL_COLUMN, MAPPING_CODE_COLUMN, MAPPING_NAME_COLUMN}
    missing = expected - set(columns)
    if missing:
        raise MissingColumnsError(f"sheet '{sheet_name}' missing columns: {sorted(missing)}")

    idx_original = columns.index(MAPPING_ORIGINAL_COLUMN)
    idx_code = columns.index(MAPPING_CODE_COLUMN)
    idx_name = columns.index(MAPPING_NAME_COLUMN)

    table: dict[str, MappingEntry] = {}
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values: list[Any] = list(raw)
        original = cell_to_text(values[idx_original])
        if not original:
            continue
        table[original] = MappingEntry(
            original_name=original,
            code=cell_to_text(values[idx_code]),
            display_name=cell_to_text(values[idx_name]),
        )
    return table


def read_mapping_table(path: Path, keep_na_strings: list[str] | None = None) -> dict[str, MappingEntry]:
    """Load the store mapping table from the first sheet of ``path``."""
    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise WorkbookReadError(f"mapping workbook '{Path(path).name}' has no sheets")
            first = xls.sheet_names[0]
        grids = read_excel_file(path, target_sheets=[str(first)], keep_na_strings=keep_na_strings)
    except WorkbookReadError:
        raise
    except FileNotFoundError as e:
        raise WorkbookReadError(f"file not found: {path}") from e
    except Exception as e:
        raise WorkbookReadError(f"cannot read workbook '{Path(path).name}': {e}") from e
    grid = grids[str(first)]
    return normalize_mapping_sheet(grid.frame, grid.name)
