from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .records import MappingFailure

"""One line of the per-run error log.

Two kinds of entries are written:

* ``MAPPING_FAILED``: a store block on a weekday sheet whose name is not in
  the mapping table. One entry per (day, store) pair, with the anchor row.
* workbook-level failures (``WORKBOOK_READ_ERROR``, ``MAPPING_COLUMNS_MISSING``,
  ``SHEET_HEADER_ERROR``, ``OUTPUT_WRITE_ERROR``): ``sheet`` is ``<FILE_LEVEL>``
  and ``row`` is -1.
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL_SHEET",
    "MAPPING_FAILED",
    "WORKBOOK_READ_ERROR",
    "MAPPING_COLUMNS_MISSING",
    "SHEET_HEADER_ERROR",
    "OUTPUT_WRITE_ERROR",
]

FILE_LEVEL_SHEET = "<FILE_LEVEL>"

MAPPING_FAILED = "MAPPING_FAILED"
WORKBOOK_READ_ERROR = "WORKBOOK_READ_ERROR"
MAPPING_COLUMNS_MISSING = "MAPPING_COLUMNS_MISSING"
SHEET_HEADER_ERROR = "SHEET_HEADER_ERROR"
OUTPUT_WRITE_ERROR = "OUTPUT_WRITE_ERROR"


def _utc_stamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorRecord:
    """JSON Lines error log entry.

    Keys are fixed: timestamp (UTC, 'Z' suffix), file, sheet, row, error_type,
    message. ``row`` is 1-based, -1 when no sheet row applies.
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @classmethod
    def create(cls, file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        return cls(_utc_stamp(), file, sheet, row, error_type, message)

    @classmethod
    def for_mapping_failure(cls, file: str, failure: MappingFailure) -> ErrorRecord:
        return cls.create(
            file,
            failure.day_name,
            failure.row,
            MAPPING_FAILED,
            f"store name not in mapping table: {failure.store_name}",
        )

    @classmethod
    def for_file(cls, file: str, error_type: str, message: str) -> ErrorRecord:
        """Workbook-level entry (no sheet / row)."""
        return cls.create(file, FILE_LEVEL_SHEET, -1, error_type, message)

    @property
    def is_file_level(self) -> bool:
        return self.sheet == FILE_LEVEL_SHEET

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
