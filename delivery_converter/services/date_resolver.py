from __future__ import annotations

import logging
import re
from datetime import date, timedelta

logger = logging.getLogger(__name__)

"""Weekday date resolution from the origin file name.

File names look like ``간식서비스 26년 1월 3주차 (1.12~1.16).xlsx``: the
day range gives month/day of Monday, the year-month part gives the year.
"""

__all__ = [
    "WEEKDAY_LABELS",
    "DEFAULT_BASE_DATE",
    "resolve_base_date",
    "weekday_dates",
]

WEEKDAY_LABELS: tuple[str, ...] = ("월", "화", "수", "목", "금")
DEFAULT_BASE_DATE = date(2026, 1, 12)

_DAY_RANGE = re.compile(r"\((\d+)\.(\d+)~(\d+)\.(\d+)\)")
_YEAR_MONTH = re.compile(r"(\d+)년\s*(\d+)월")


def resolve_base_date(file_name: str, default: date = DEFAULT_BASE_DATE) -> date:
    """Return the date of the first weekday covered by ``file_name``.

    Both patterns must match; otherwise ``default`` is returned. Two digit
    years are taken as 20xx.
    """
    day_range = _DAY_RANGE.search(file_name)
    year_month = _YEAR_MONTH.search(file_name)
    if not day_range or not year_month:
        logger.warning("date pattern not found in file name, using default %s: %s", default.isoformat(), file_name)
        return default

    year = int(year_month.group(1))
    if year < 100:
        year += 2000
    month = int(day_range.group(1))
    day = int(day_range.group(2))
    try:
        return date(year, month, day)
    except ValueError:
        logger.warning("invalid date %04d-%02d-%02d in file name, using default %s", year, month, day, default.isoformat())
        return default


def weekday_dates(base: date, labels: tuple[str, ...] = WEEKDAY_LABELS) -> dict[str, date]:
    """Map each weekday label to ``base + index`` days (insertion order = label order)."""
    return {label: base + timedelta(days=idx) for idx, label in enumerate(labels)}
