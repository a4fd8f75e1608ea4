from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .records import DailyRecord, MappingFailure, MatchStatus, StoreDailyAggregate, ValidationRow

"""Conversion result models.

ConversionResult is the backend contract output (pure data, identical across
backends). RunSummary adds run-level metrics for the SUMMARY line and the CLI.
"""

__all__ = [
    "SheetStat",
    "ConversionResult",
    "RunSummary",
]


@dataclass(frozen=True)
class SheetStat:
    """Per weekday sheet statistics."""
    day_name: str
    date: str
    blocks: int  # 検出ブロック数
    extracted_rows: int


@dataclass(frozen=True)
class ConversionResult:
    """Dataset / validation / aggregate / failure outputs of one conversion."""
    records: list[DailyRecord]
    validation: list[ValidationRow]
    store_daily: list[StoreDailyAggregate]
    mapping_failures: list[str]  # 重複排除済 (初出順)
    backend: str = "reference"
    sheet_stats: list[SheetStat] = field(default_factory=list)
    failure_events: list[MappingFailure] = field(default_factory=list)  # (曜日, 店舗) 単位、重複あり

    def same_values(self, other: ConversionResult) -> bool:
        """True when every record/row/aggregate/failure matches (backend name ignored)."""
        return (
            self.records == other.records
            and self.validation == other.validation
            and self.store_daily == other.store_daily
            and self.mapping_failures == other.mapping_failures
        )

    @property
    def mismatch_days(self) -> int:
        return sum(1 for v in self.validation if v.match_result.status is MatchStatus.MISMATCH)


@dataclass(frozen=True)
class RunSummary:
    """Run-level metrics reported after the result workbook is written."""
    extracted_rows: int
    processed_sheets: int
    mismatch_days: int
    mapping_failures: int
    backend: str
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    output_path: Path | None = None
