from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

"""Read-only 1-indexed grid view over a raw (header-less) sheet DataFrame.

The extraction services only use ``cell(row, col)`` and ``occupied_range()``;
the DataFrame behind the grid is exposed separately as ``frame`` for the
vectorized backend.

Cell parsing helpers live here as well so both backends coerce values the same
way:
- ``cell_to_int``: int as is, finite float truncated, string with a leading
  integer ("12", " 7 box"), everything else -> None
- ``cell_to_text``: trimmed string form, "" for empty cells
"""

__all__ = [
    "SheetGrid",
    "normalize_cell",
    "cell_to_int",
    "cell_to_text",
]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_cell(value: Any) -> Any:
    """Convert a raw DataFrame value to a plain Python scalar (None for empty)."""
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if value is pd.NaT:
        return None
    return value


def cell_to_int(value: Any) -> int | None:
    """Parse a cell as an integer the way the sheet authors intend it.

    Returns None when the value does not start with an integer.
    """
    value = normalize_cell(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isinf(value):
            return None
        return int(value)
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        return int(m.group(1)) if m else None
    return None


def cell_to_text(value: Any) -> str:
    value = normalize_cell(value)
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True, eq=False)
class SheetGrid:
    """Immutable view of one sheet.

    Row/column numbers are 1-indexed like the workbook (row 1 = first row,
    column 1 = column A). Coordinates outside the occupied range read as None.
    """
    name: str
    frame: pd.DataFrame

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]]) -> SheetGrid:
        """Build a grid from row lists (row 0 -> sheet row 1)."""
        frame = pd.DataFrame([list(r) for r in rows], dtype=object)
        return cls(name=name, frame=frame)

    def occupied_range(self) -> tuple[int, int]:
        """Return (max_row, max_col)."""
        rows, cols = self.frame.shape
        return int(rows), int(cols)

    def cell(self, row: int, col: int) -> Any:
        max_row, max_col = self.occupied_range()
        if row < 1 or col < 1 or row > max_row or col > max_col:
            return None
        return normalize_cell(self.frame.iat[row - 1, col - 1])
