from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Store block layout models.

A weekday sheet hosts up to three store blocks side by side. Each horizontal
position (column family) uses a fixed set of columns; the table below is the
single source for those offsets and is shared by block location, product
extraction and reconciliation.
"""

__all__ = [
    "ColumnFamily",
    "FamilyOffsets",
    "COLUMN_FAMILIES",
    "BlockDescriptor",
    "ProductLine",
]


class ColumnFamily(Enum):
    """Horizontal block position on a weekday sheet (left -> right)."""
    A = "A"
    B = "B"
    C = "C"


@dataclass(frozen=True)
class FamilyOffsets:
    """1-indexed column numbers used by one column family."""
    sequence_no: int  # No. 列 (アンカーセルも同じ列)
    secondary: int  # 오후 진열 (afternoon display)
    product_name: int
    box_qty: int

    @property
    def anchor(self) -> int:
        return self.sequence_no


COLUMN_FAMILIES: dict[ColumnFamily, FamilyOffsets] = {
    ColumnFamily.A: FamilyOffsets(sequence_no=2, secondary=3, product_name=5, box_qty=6),
    ColumnFamily.B: FamilyOffsets(sequence_no=11, secondary=12, product_name=14, box_qty=15),
    ColumnFamily.C: FamilyOffsets(sequence_no=20, secondary=21, product_name=23, box_qty=24),
}


@dataclass(frozen=True)
class BlockDescriptor:
    """One store block found on a sheet.

    anchor_row is the row of the marker cell (``※ store : n``); product rows
    start four rows below it.
    """
    store_name: str
    anchor_row: int
    column_family: ColumnFamily
    col_sequence_no: int
    col_secondary: int
    col_product_name: int
    col_box_qty: int

    @classmethod
    def for_family(cls, store_name: str, anchor_row: int, family: ColumnFamily) -> BlockDescriptor:
        offsets = COLUMN_FAMILIES[family]
        return cls(
            store_name=store_name,
            anchor_row=anchor_row,
            column_family=family,
            col_sequence_no=offsets.sequence_no,
            col_secondary=offsets.secondary,
            col_product_name=offsets.product_name,
            col_box_qty=offsets.box_qty,
        )


@dataclass(frozen=True)
class ProductLine:
    store_name: str
    product_name: str  # trimmed, non-empty
    box_qty: int  # > 0
    secondary_text: str = ""
