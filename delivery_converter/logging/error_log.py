from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-run JSON Lines error log.

Records are held in memory during a conversion and written when the run ends
(or aborts). The file ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC stamp taken at
the first write) is only created when there is something to write, so a clean
run leaves no log behind.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecord entries and appends them to one log file per run."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None
        self.written = 0

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def path(self) -> Path | None:
        """Log file path, None until the first non-empty flush."""
        return self._path

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def counts(self) -> dict[str, int]:
        """Pending records per error_type."""
        return dict(Counter(r.error_type for r in self._pending))

    def flush(self) -> Path | None:
        """Append pending records; returns the log path, or None when nothing was pending."""
        if not self._pending:
            return None
        if self._path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.logs_dir / f"errors-{datetime.now(UTC).strftime(TIMESTAMP_FMT)}.log"
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(lines)
        self.written += len(self._pending)
        self._pending.clear()
        return self._path
