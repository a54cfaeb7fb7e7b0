"""
Reconcile - chronological merge.

Concatenates per-kind event lists and orders them by day, then kind rank
(charges before settlements before everything else), then time of day.
Python's sort is stable, so input order breaks any remaining tie.
"""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import chain
from typing import Iterable, List, Sequence

from .events import LedgerEvent, kind_rank


def _comparable(ts: datetime) -> datetime:
    # aware and naive datetimes cannot be compared; fold aware ones onto naive UTC
    if ts.tzinfo is not None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def sort_key(event: LedgerEvent) -> tuple:
    return (event.day, kind_rank(event.kind), _comparable(event.timestamp))


def merge(event_lists: Iterable[Sequence[LedgerEvent]]) -> List[LedgerEvent]:
    return sorted(chain.from_iterable(event_lists), key=sort_key)
