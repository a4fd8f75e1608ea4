#!/usr/bin/env python3
"""Sample workbook generation for manual runs and performance testing.

Generates a synthetic weekly origin workbook (weekday sheets 월~금 with store
blocks side by side) plus the matching mapping workbook:
- Row 1: Title row
- Row 8, column F: sheet total
- Store blocks from row 31 downward in columns B / K / T, each block closed
  by a "계" subtotal row
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

WEEKDAYS = ["월", "화", "수", "목", "금"]
# (sequence no, afternoon display, product name, box qty) - 1-indexed columns
FAMILY_COLUMNS = [(2, 3, 5, 6), (11, 12, 14, 15), (20, 21, 23, 24)]
FIRST_ANCHOR_ROW = 31
PRODUCTS = ["바나나우유", "초코파이", "새우깡", "포카리스웨트", "오렌지주스", "단백질바", "컵라면", "삼각김밥"]


def build_week_sheet(stores: list[str], products_per_store: int, seed: int = 42) -> list[list[Any]]:
    """Build one weekday sheet as row lists (row 0 -> sheet row 1).

    Stores are laid out left to right over the three column families, then
    downward. Returns the rows; the F8 total equals the sum of all subtotals.
    """
    rng = np.random.default_rng(seed)
    cells: dict[tuple[int, int], Any] = {(1, 1): "간식서비스 주간 배송표"}
    grand_total = 0
    block_height = 4 + products_per_store + 2
    for idx, store in enumerate(stores):
        seq_col, pm_col, name_col, box_col = FAMILY_COLUMNS[idx % len(FAMILY_COLUMNS)]
        anchor = FIRST_ANCHOR_ROW + (idx // len(FAMILY_COLUMNS)) * block_height
        cells[(anchor, seq_col)] = f"※ {store} : {products_per_store}"
        cells[(anchor + 2, seq_col)] = "No."
        cells[(anchor + 2, name_col)] = "품목명"
        cells[(anchor + 2, box_col)] = "Box"
        subtotal = 0
        for i in range(products_per_store):
            row = anchor + 4 + i
            qty = int(rng.integers(0, 12))
            cells[(row, seq_col)] = i + 1
            cells[(row, pm_col)] = "O" if rng.random() < 0.3 else None
            cells[(row, name_col)] = PRODUCTS[int(rng.integers(0, len(PRODUCTS)))]
            cells[(row, box_col)] = qty
            subtotal += qty
        cells[(anchor + 4 + products_per_store, seq_col)] = "계"
        cells[(anchor + 4 + products_per_store, box_col)] = subtotal
        grand_total += subtotal
    cells[(8, 6)] = grand_total

    max_row = max(r for r, _ in cells)
    max_col = max(c for _, c in cells)
    rows: list[list[Any]] = [[None] * max_col for _ in range(max_row)]
    for (r, c), value in cells.items():
        rows[r - 1][c - 1] = value
    return rows


def write_sample_workbooks(
    output_dir: Path, stores: int, products_per_store: int, seed: int = 42, unmapped: int = 1
) -> tuple[Path, Path]:
    """Write origin + mapping workbooks; the last ``unmapped`` stores get no mapping row."""
    output_dir.mkdir(parents=True, exist_ok=True)
    names = [f"매장{i + 1:03d}" for i in range(stores)]
    origin = output_dir / "간식서비스 26년 1월 3주차 (1.12~1.16).xlsx"
    mapping = output_dir / "mapping.xlsx"

    with pd.ExcelWriter(origin, engine="openpyxl") as writer:
        for day_idx, day in enumerate(WEEKDAYS):
            rows = build_week_sheet(names, products_per_store, seed + day_idx)
            pd.DataFrame(rows, dtype=object).to_excel(writer, sheet_name=day, header=False, index=False)

    mapped = names[: max(0, stores - unmapped)]
    mapping_rows = [[f"S{i + 1:04d}", name, f"{name} 지점"] for i, name in enumerate(mapped)]
    pd.DataFrame(mapping_rows, columns=["코드", "원본 사업장명", "사업장명"]).to_excel(
        mapping, sheet_name="매핑", index=False
    )
    return origin, mapping


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic weekly origin workbook and mapping table")
    parser.add_argument("output_dir", type=Path, help="Output directory")
    parser.add_argument("--stores", type=int, default=30, help="Stores per weekday sheet (default: 30)")
    parser.add_argument("--products", type=int, default=20, help="Product rows per store block (default: 20)")
    parser.add_argument("--unmapped", type=int, default=1, help="Stores left out of the mapping table (default: 1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.stores <= 0 or args.products <= 0:
        print("Error: --stores and --products must be positive", file=sys.stderr)
        return 1
    if args.products > 25:
        print("Warning: blocks longer than 25 products are truncated by the converter", file=sys.stderr)

    origin, mapping = write_sample_workbooks(args.output_dir, args.stores, args.products, args.seed, args.unmapped)
    print(f"Created origin workbook: {origin}")
    print(f"Created mapping workbook: {mapping}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
