"""
Reconcile - statement rows for display.

Caller-side view over engine entries. A charge that is followed on the
same day by one or more settlements is shown as a single row (e.g.
"Bill+Payment"). The merge order already places same-day charges before
settlements, so this is a single forward pass with no re-sorting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Sequence, Tuple

from .ledger import LedgerEntry
from .money import ZERO
from .profiles import AccountProfile


@dataclass(frozen=True)
class StatementRow:
    timestamp: datetime
    badge: str
    references: Tuple[str, ...]
    charge_amount: Decimal
    settlement_amount: Decimal
    running_balance: Decimal
    entries: Tuple[LedgerEntry, ...]


def _row(profile: AccountProfile, group: List[LedgerEntry]) -> StatementRow:
    head = group[0]
    if len(group) > 1 and profile.combined_label:
        badge = profile.combined_label
    else:
        badge = profile.label(head.event.kind)

    return StatementRow(
        timestamp=head.timestamp,
        badge=badge,
        references=tuple(e.event.reference for e in group if e.event.reference),
        charge_amount=sum((e.charge_amount for e in group), ZERO),
        settlement_amount=sum((e.settlement_amount for e in group), ZERO),
        running_balance=group[-1].running_balance,
        entries=tuple(group),
    )


def statement_rows(entries: Sequence[LedgerEntry], profile: AccountProfile) -> List[StatementRow]:
    rows: List[StatementRow] = []
    group: List[LedgerEntry] = []

    for entry in entries:
        ev = entry.event
        joins = (
            profile.combined_label is not None
            and group
            and group[0].event.is_charge
            and ev.is_settlement
            and ev.day == group[0].day
        )
        if joins:
            group.append(entry)
            continue
        if group:
            rows.append(_row(profile, group))
        group = [entry]

    if group:
        rows.append(_row(profile, group))
    return rows
