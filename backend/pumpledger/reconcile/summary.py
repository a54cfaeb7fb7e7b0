"""
Reconcile - summary aggregation.

Reduces each window partition into category totals plus a boundary balance.

Balance semantics per summary:
- before:  balance after the last event before the window (opening if none)
- within:  balance after the last event in the window (before.balance if none);
           its totals are a pure sum over in-window events
- to_date: balance after the last event overall (opening if none)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, Sequence

from .events import LedgerEvent
from .ledger import LedgerEntry
from .money import ZERO, exact_sums
from .window import WindowPartition

CategoryRule = Callable[[LedgerEvent], str]


@dataclass(frozen=True)
class Summary:
    starting_balance: Decimal
    balance: Decimal
    net: Decimal
    count: int
    totals: Dict[str, Decimal] = field(default_factory=dict)

    def total(self, category: str) -> Decimal:
        return self.totals.get(category, ZERO)


@dataclass(frozen=True)
class LedgerSummaries:
    before: Summary
    within: Summary
    to_date: Summary


def _totals(
    entries: Iterable[LedgerEntry],
    category_rule: CategoryRule,
    categories: Sequence[str],
) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {name: ZERO for name in categories}
    for entry in entries:
        ev = entry.event
        if ev.anomaly:
            continue
        key = category_rule(ev)
        totals[key] = totals.get(key, ZERO) + ev.gross_amount
    return totals


def summarize_part(
    entries: Sequence[LedgerEntry],
    starting_balance: Decimal,
    category_rule: CategoryRule,
    categories: Sequence[str] = (),
) -> Summary:
    net = ZERO
    with exact_sums():
        for entry in entries:
            net += entry.event.signed_amount
        totals = _totals(entries, category_rule, categories)

    return Summary(
        starting_balance=starting_balance,
        balance=entries[-1].running_balance if entries else starting_balance,
        net=net,
        count=len(entries),
        totals=totals,
    )


def summarize(
    entries: Sequence[LedgerEntry],
    parts: WindowPartition[LedgerEntry],
    opening_balance: Decimal,
    category_rule: CategoryRule,
    categories: Sequence[str] = (),
) -> LedgerSummaries:
    """
    `entries` is the full ordered history; `parts` is its partition.
    """
    before = summarize_part(parts.before, opening_balance, category_rule, categories)
    within = summarize_part(parts.within, before.balance, category_rule, categories)
    to_date = summarize_part(entries, opening_balance, category_rule, categories)
    return LedgerSummaries(before=before, within=within, to_date=to_date)
