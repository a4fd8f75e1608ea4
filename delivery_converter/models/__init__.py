"""Domain models for the weekly delivery workbook converter.

This package contains the value objects passed between the grid scan, the
extraction services and the result writer.
"""

from .block import COLUMN_FAMILIES, BlockDescriptor, ColumnFamily, FamilyOffsets, ProductLine
from .conversion_result import ConversionResult, RunSummary, SheetStat
from .error_record import ErrorRecord
from .records import (
    DailyRecord,
    MappingEntry,
    MappingFailure,
    MatchResult,
    MatchStatus,
    StoreDailyAggregate,
    StoreIdentity,
    ValidationRow,
)

__all__ = [
    # Layout models
    "COLUMN_FAMILIES",
    "BlockDescriptor",
    "ColumnFamily",
    "FamilyOffsets",
    "ProductLine",
    # Record models
    "DailyRecord",
    "MappingEntry",
    "MappingFailure",
    "MatchResult",
    "MatchStatus",
    "StoreDailyAggregate",
    "StoreIdentity",
    "ValidationRow",
    # Run models
    "ConversionResult",
    "ErrorRecord",
    "RunSummary",
    "SheetStat",
]
