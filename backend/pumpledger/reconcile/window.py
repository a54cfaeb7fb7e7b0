"""
Reconcile - date window partitioning.

Boundaries are inclusive and compared at day granularity, so an event at
23:59 on to_date is inside the window and one at 00:00 on from_date is too.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Generic, List, Sequence, TypeVar, Union

from .events import InvalidWindowError

T = TypeVar("T")

DateLike = Union[date, datetime]


def as_day(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class DateWindow:
    from_date: date
    to_date: date

    @classmethod
    def of(cls, from_date: DateLike, to_date: DateLike) -> "DateWindow":
        start, end = as_day(from_date), as_day(to_date)
        if start > end:
            raise InvalidWindowError(
                f"from_date {start.isoformat()} is after to_date {end.isoformat()}"
            )
        return cls(start, end)


@dataclass(frozen=True)
class WindowPartition(Generic[T]):
    before: List[T]
    within: List[T]
    after: List[T]


def _day_of(item: Any) -> date:
    return item.timestamp.date()


def partition(ordered: Sequence[T], window: DateWindow) -> WindowPartition[T]:
    """
    Split an ordered sequence of events (or entries) around the window.

    Order is preserved inside each part. Items after to_date are kept in
    `after` so callers can still account for the full history.
    """
    before: List[T] = []
    within: List[T] = []
    after: List[T] = []

    for item in ordered:
        d = _day_of(item)
        if d < window.from_date:
            before.append(item)
        elif d > window.to_date:
            after.append(item)
        else:
            within.append(item)

    return WindowPartition(before=before, within=within, after=after)
