"""
Reconcile - running balance construction.

Responsibility:
- Walk merged events once, in order, attaching the balance after each event.

Design notes:
- This is a strict left fold; an entry's balance depends on every prior
  entry, so entries are never recomputed independently.
- Decimal arithmetic only. Balances reconcile to the paisa with no tolerance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from .events import LedgerEvent
from .merge import sort_key
from .money import ZERO, exact_sums


@dataclass(frozen=True)
class LedgerEntry:
    """
    A single statement line.

    Invariants:
    - running_balance is the balance after applying event.signed_amount
    - charge_amount / settlement_amount split gross_amount for display;
      at most one of them is non-zero for a single event
    """
    event: LedgerEvent
    running_balance: Decimal
    charge_amount: Decimal
    settlement_amount: Decimal

    @property
    def timestamp(self) -> datetime:
        return self.event.timestamp

    @property
    def day(self) -> date:
        return self.event.day


def _split(event: LedgerEvent) -> tuple:
    # non-charge, non-settlement kinds (deposits, stock moves) split by sign
    if event.is_charge or (not event.is_settlement and event.signed_amount >= 0):
        return event.gross_amount, ZERO
    return ZERO, event.gross_amount


def apply_balances(opening_balance: Decimal, ordered_events: Sequence[LedgerEvent]) -> List[LedgerEntry]:
    balance = opening_balance
    entries: List[LedgerEntry] = []

    with exact_sums():
        for ev in ordered_events:
            balance += ev.signed_amount
            charge, settlement = _split(ev)
            entries.append(
                LedgerEntry(
                    event=ev,
                    running_balance=balance,
                    charge_amount=charge,
                    settlement_amount=settlement,
                )
            )

    return entries


class LedgerIntegrityError(ValueError):
    pass


def check_ledger_integrity(
    entries: Iterable[LedgerEntry],
    *,
    opening_balance: Decimal = ZERO,
) -> Dict[str, Any]:
    """
    Side-effect-free statement integrity check.

    Invariants:
    - Entries follow the merge order.
    - Running balances are continuous from the opening balance.
    - Charges + settlements split every gross amount exactly.
    - Net movement reconciles to the closing balance.
    """
    rows = list(entries)
    last_balance = opening_balance
    prev_key: tuple | None = None

    charges = ZERO
    settlements = ZERO
    net = ZERO

    for idx, row in enumerate(rows):
        ev = row.event
        if not ev.signed_amount.is_finite():
            raise LedgerIntegrityError(f"Invariant violation: non-finite amount at row {idx}.")

        key = sort_key(ev)
        if prev_key and key < prev_key:
            raise LedgerIntegrityError(
                "Invariant violation: ledger rows are not deterministically ordered."
            )

        if row.running_balance != last_balance + ev.signed_amount:
            raise LedgerIntegrityError(
                f"Invariant violation: running balance mismatch at row {idx}."
            )

        if row.charge_amount + row.settlement_amount != ev.gross_amount:
            raise LedgerIntegrityError(
                f"Invariant violation: charge/settlement split does not match gross at row {idx}."
            )

        charges += row.charge_amount
        settlements += row.settlement_amount
        net += ev.signed_amount
        last_balance = row.running_balance
        prev_key = key

    if rows and rows[-1].running_balance - opening_balance != net:
        raise LedgerIntegrityError(
            "Invariant violation: net movement does not reconcile to closing balance."
        )

    return {
        "rows": len(rows),
        "net_movement": net,
        "charge_total": charges,
        "settlement_total": settlements,
        "closing_balance": last_balance,
    }
