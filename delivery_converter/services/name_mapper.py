from __future__ import annotations

import logging

from ..models.records import MappingEntry, MappingFailure, StoreIdentity

logger = logging.getLogger(__name__)

"""Store name -> (code, canonical name) resolution.

A miss never aborts the run: the store gets the MAPPING_FAILED code and a
prefixed display name so every block still yields dataset rows, and the
(day, store) pair is recorded for the Mapping Failures report.
"""

__all__ = [
    "FAILURE_CODE",
    "FAILURE_PREFIX",
    "NameMapper",
]

FAILURE_CODE = "MAPPING_FAILED"
FAILURE_PREFIX = "[매핑실패] "


class NameMapper:
    """Exact-string lookup against a preloaded mapping table.

    One mapper is created per conversion; it accumulates the failures seen
    during that conversion only.
    """

    def __init__(self, table: dict[str, MappingEntry]) -> None:
        self._table = table
        self._failures: list[MappingFailure] = []
        self._warned: set[str] = set()

    @property
    def failures(self) -> list[MappingFailure]:
        return list(self._failures)

    def resolve(self, store_name: str, day_name: str = "", row: int = -1) -> StoreIdentity:
        entry = self._table.get(store_name)
        if entry is not None:
            return StoreIdentity(code=entry.code, display_name=entry.display_name, failed=False)

        self._failures.append(MappingFailure(day_name=day_name, store_name=store_name, row=row))
        if store_name not in self._warned:
            self._warned.add(store_name)
            logger.warning("store name not in mapping table: %s (day=%s)", store_name, day_name)
        return StoreIdentity(code=FAILURE_CODE, display_name=FAILURE_PREFIX + store_name, failed=True)
