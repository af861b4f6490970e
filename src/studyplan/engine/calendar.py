"""Date-only calendar helpers.

Every comparison here runs on ``datetime.date`` values: off-day matching is
plain set membership, so inputs must already be normalized with
``studyplan.models.to_date``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from studyplan.models import OffDay


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each day in ``[start, end]``; nothing when ``start > end``."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def off_day_dates(off_days: Iterable[OffDay | date]) -> frozenset[date]:
    return frozenset(item.date if isinstance(item, OffDay) else item for item in off_days)


def is_off_day(day: date, off_days: Iterable[OffDay | date]) -> bool:
    return day in off_day_dates(off_days)


def count_available_days(start: date, end: date, off_days: Iterable[OffDay | date]) -> int:
    """Count study days in ``[start, end]`` inclusive that are not off-days."""
    blocked = off_day_dates(off_days)
    return sum(1 for day in iter_days(start, end) if day not in blocked)


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``; negative when ``end`` is earlier."""
    return (end - start).days
