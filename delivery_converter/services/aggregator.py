from __future__ import annotations

from collections.abc import Iterable

from ..models.block import ProductLine
from ..models.records import DailyRecord, MappingFailure, StoreDailyAggregate, StoreIdentity

"""Record aggregation: dataset rows, per (date, store) sums, failure list."""

__all__ = [
    "to_daily_records",
    "aggregate_store_daily",
    "unique_failure_names",
]


def to_daily_records(date_str: str, identity: StoreIdentity, lines: Iterable[ProductLine]) -> list[DailyRecord]:
    return [
        DailyRecord(
            date=date_str,
            code=identity.code,
            display_name=identity.display_name,
            product_name=line.product_name,
            box_qty=line.box_qty,
            secondary_text=line.secondary_text,
            mapping_failed=identity.failed,
        )
        for line in lines
    ]


def aggregate_store_daily(records: Iterable[DailyRecord]) -> list[StoreDailyAggregate]:
    """Sum box quantities per (date, code, display name).

    The first occurrence of a key fixes its position; later ones only add.
    """
    sums: dict[tuple[str, str, str], int] = {}
    for r in records:
        key = (r.date, r.code, r.display_name)
        sums[key] = sums.get(key, 0) + r.box_qty
    return [
        StoreDailyAggregate(date=d, code=c, display_name=n, box_sum=total)
        for (d, c, n), total in sums.items()
    ]


def unique_failure_names(failures: Iterable[MappingFailure]) -> list[str]:
    # dict で順序保持しつつ重複排除
    return list(dict.fromkeys(f.store_name for f in failures))
