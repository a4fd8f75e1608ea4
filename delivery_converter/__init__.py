"""Weekly delivery workbook -> store/product dataset converter."""

__version__ = "0.1.0"
