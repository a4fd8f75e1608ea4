from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Record models produced by a conversion run.

All records are immutable value objects without references back into the
source grid, so a result can be compared, serialized or written independently
of the workbook it came from.
"""

__all__ = [
    "MappingEntry",
    "StoreIdentity",
    "DailyRecord",
    "MatchStatus",
    "MatchResult",
    "ValidationRow",
    "StoreDailyAggregate",
    "MappingFailure",
]


@dataclass(frozen=True)
class MappingEntry:
    """One row of the store mapping table (original name -> code / canonical name)."""
    original_name: str  # key (unique)
    code: str
    display_name: str


@dataclass(frozen=True)
class StoreIdentity:
    code: str
    display_name: str
    failed: bool = False


@dataclass(frozen=True)
class DailyRecord:
    """One extracted product line with its resolved store identity and date."""
    date: str  # ISO (YYYY-MM-DD)
    code: str
    display_name: str
    product_name: str
    box_qty: int
    secondary_text: str = ""
    mapping_failed: bool = False


class MatchStatus(Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    NO_ORIGINAL_DATA = "no_original_data"


@dataclass(frozen=True)
class MatchResult:
    status: MatchStatus
    diff: int = 0  # extracted - original (MISMATCH 時のみ意味を持つ)

    @property
    def label(self) -> str:
        """Human readable form used in the Validation sheet."""
        if self.status is MatchStatus.MATCH:
            return "Match"
        if self.status is MatchStatus.MISMATCH:
            return f"Mismatch (diff: {self.diff})"
        return "No original data"


@dataclass(frozen=True)
class ValidationRow:
    date: str
    day_name: str
    extracted_sum: int
    original_total: int
    original_store_sum: int
    match_result: MatchResult


@dataclass(frozen=True)
class StoreDailyAggregate:
    date: str
    code: str
    display_name: str
    box_sum: int


@dataclass(frozen=True)
class MappingFailure:
    """A (day, store) pair whose store name had no mapping entry."""
    day_name: str
    store_name: str
    row: int = -1  # アンカー行 (不明時 -1)
