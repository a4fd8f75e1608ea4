from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

from ..models.conversion_result import SheetStat

"""Weekday sheet progress bar (tqdm, TTY only).

The bar advances once per converted sheet and shows the day, its date and the
running row count. Redirected output (CI, log files) gets no bar at all, the
INFO / SUMMARY lines already cover it there.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]

BAR_FORMAT = "{desc}: {n_fmt}/{total_fmt} sheets |{bar}| {postfix}"


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    def __init__(self, total_sheets: int, *, description: str = "Converting") -> None:
        self.total_sheets = total_sheets
        self.done: list[SheetStat] = []
        self.pbar: Any = None
        if total_sheets and is_tty_enabled():
            self.pbar = tqdm(total=total_sheets, desc=description, bar_format=BAR_FORMAT, ncols=80, ascii=True, leave=True)

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    @property
    def rows(self) -> int:
        return sum(s.extracted_rows for s in self.done)

    def sheet_done(self, stat: SheetStat) -> None:
        self.done.append(stat)
        if self.pbar is not None:
            self.pbar.set_postfix_str(f"{stat.day_name} {stat.date} rows={self.rows}", refresh=False)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
