from __future__ import annotations

from ..excel.grid import SheetGrid, cell_to_int, cell_to_text
from ..models.block import BlockDescriptor, ProductLine

"""Product line extraction for one store block.

Rules per row (starting four rows below the anchor, at most ``max_products``
rows):
1. sequence number missing / not an integer -> end of block (break)
2. product name blank -> skip the row (continue)
3. box quantity not a positive integer -> skip the row
4. otherwise emit a ProductLine
"""

__all__ = [
    "HEADER_ROWS",
    "DEFAULT_MAX_PRODUCTS",
    "extract_products",
]

HEADER_ROWS = 4  # アンカー行から商品1行目までのオフセット (レイアウト固定)
DEFAULT_MAX_PRODUCTS = 25


def extract_products(
    grid: SheetGrid, block: BlockDescriptor, max_products: int = DEFAULT_MAX_PRODUCTS
) -> list[ProductLine]:
    products: list[ProductLine] = []
    start_row = block.anchor_row + HEADER_ROWS
    for row in range(start_row, start_row + max_products):
        if cell_to_int(grid.cell(row, block.col_sequence_no)) is None:
            break

        product_name = cell_to_text(grid.cell(row, block.col_product_name))
        if not product_name:
            continue

        box_qty = cell_to_int(grid.cell(row, block.col_box_qty)) or 0
        if box_qty <= 0:
            continue

        products.append(
            ProductLine(
                store_name=block.store_name,
                product_name=product_name,
                box_qty=box_qty,
                secondary_text=cell_to_text(grid.cell(row, block.col_secondary)),
            )
        )
    return products
