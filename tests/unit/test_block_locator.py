from __future__ import annotations

import pytest

from delivery_converter.models.block import BlockDescriptor, ColumnFamily
from delivery_converter.services.block_locator import extract_store_name, find_store_blocks


@pytest.mark.parametrize(
    "value, expected",
    [
        ("※ Downtown Store : 3", "Downtown Store"),
        ("※본사 1층:12", "본사 1층"),
        ("※  물류센터  :  ", "물류센터"),
        ("비고 ※ 신관 : 4", "신관"),
    ],
)
def test_extract_store_name_from_anchor(value, expected):
    assert extract_store_name(value) == expected


@pytest.mark.parametrize("value", [None, 3, "본사 1층 : 12", "※ 콜론없음", "※ : 3", ""])
def test_extract_store_name_rejects_non_anchor(value):
    assert extract_store_name(value) is None


def test_find_store_blocks_row_major_then_family(week_sheet):
    sheet = week_sheet()
    sheet.add_block(ColumnFamily.C, 10, "C-first-row", [(1, "a", 1)])
    sheet.add_block(ColumnFamily.A, 10, "A-first-row", [(1, "a", 1)])
    sheet.add_block(ColumnFamily.B, 20, "B-second-row", [(1, "a", 1)])

    blocks = find_store_blocks(sheet.grid())

    assert [(b.store_name, b.anchor_row, b.column_family) for b in blocks] == [
        ("A-first-row", 10, ColumnFamily.A),
        ("C-first-row", 10, ColumnFamily.C),
        ("B-second-row", 20, ColumnFamily.B),
    ]


def test_find_store_blocks_uses_family_columns(week_sheet):
    sheet = week_sheet()
    sheet.add_block(ColumnFamily.B, 31, "Downtown Store", [(1, "a", 1)])

    (block,) = find_store_blocks(sheet.grid())

    assert block == BlockDescriptor(
        store_name="Downtown Store",
        anchor_row=31,
        column_family=ColumnFamily.B,
        col_sequence_no=11,
        col_secondary=12,
        col_product_name=14,
        col_box_qty=15,
    )


def test_anchor_outside_family_columns_is_ignored(week_sheet):
    # D 列 (4) はどの列ファミリーのアンカー列でもない
    sheet = week_sheet().set(31, 4, "※ 어딘가 : 2")
    assert find_store_blocks(sheet.grid()) == []


def test_same_store_name_yields_separate_blocks(week_sheet):
    sheet = week_sheet()
    sheet.add_block(ColumnFamily.A, 31, "Downtown Store", [(1, "a", 1)])
    sheet.add_block(ColumnFamily.B, 31, "Downtown Store", [(1, "b", 2)])

    blocks = find_store_blocks(sheet.grid())

    assert [b.store_name for b in blocks] == ["Downtown Store", "Downtown Store"]


def test_restricted_families(week_sheet):
    sheet = week_sheet()
    sheet.add_block(ColumnFamily.A, 31, "A", [(1, "a", 1)])
    sheet.add_block(ColumnFamily.C, 31, "C", [(1, "a", 1)])

    blocks = find_store_blocks(sheet.grid(), families=(ColumnFamily.C,))

    assert [b.store_name for b in blocks] == ["C"]
