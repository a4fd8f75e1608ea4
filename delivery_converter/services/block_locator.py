from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from ..excel.grid import SheetGrid
from ..models.block import COLUMN_FAMILIES, BlockDescriptor, ColumnFamily

"""Store block location.

An anchor cell looks like ``※ 본사 1층 : 12`` (marker, store name, colon, head
count). Every row of the occupied range is tested in each configured column
family; output is row-major, then family order.
"""

__all__ = [
    "STORE_MARKER",
    "DEFAULT_FAMILIES",
    "extract_store_name",
    "find_store_blocks",
]

STORE_MARKER = "※"
_STORE_NAME = re.compile(r"※\s*(.+?)\s*:\s*\d*")

DEFAULT_FAMILIES: tuple[ColumnFamily, ...] = (ColumnFamily.A, ColumnFamily.B, ColumnFamily.C)


def extract_store_name(value: Any) -> str | None:
    """Return the store name of an anchor cell, or None when it is not an anchor."""
    if not isinstance(value, str) or STORE_MARKER not in value:
        return None
    m = _STORE_NAME.search(value)
    if not m:
        return None
    name = m.group(1).strip()
    return name or None


def find_store_blocks(
    grid: SheetGrid, families: Sequence[ColumnFamily] = DEFAULT_FAMILIES
) -> list[BlockDescriptor]:
    blocks: list[BlockDescriptor] = []
    max_row, _ = grid.occupied_range()
    for row in range(1, max_row + 1):
        for family in families:
            store_name = extract_store_name(grid.cell(row, COLUMN_FAMILIES[family].anchor))
            if store_name:
                blocks.append(BlockDescriptor.for_family(store_name, row, family))
    return blocks
