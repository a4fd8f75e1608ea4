"""Workbook access: raw grids in, result workbook out."""

from .grid import SheetGrid, cell_to_int, cell_to_text
from .reader import MissingColumnsError, WorkbookReadError, read_excel_file, read_mapping_table
from .writer import output_file_name, write_result_workbook

__all__ = [
    "SheetGrid",
    "cell_to_int",
    "cell_to_text",
    "MissingColumnsError",
    "WorkbookReadError",
    "read_excel_file",
    "read_mapping_table",
    "output_file_name",
    "write_result_workbook",
]
