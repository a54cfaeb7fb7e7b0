"""
Reconcile - event model.

Responsibility:
- Define the normalized, immutable event shape every ledger is built from.
- Define the per-record warning emitted for anomalous upstream data.
- Define the engine's exception hierarchy.

Design notes:
- LedgerEvent.kind is a closed enum; consumers switch on it instead of
  probing optional fields.
- detail carries the original record for presentation only. The engine
  never reads it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union


class EventKind(str, Enum):
    BILL = "bill"
    SALESMAN_BILL = "salesman_bill"
    PURCHASE = "purchase"
    FUEL_PURCHASE = "fuel_purchase"
    SALARY = "salary"

    PAYMENT = "payment"
    SALESMAN_PAYMENT = "salesman_payment"
    WITHDRAWAL = "withdrawal"

    DEPOSIT = "deposit"
    STOCK_ADDITION = "stock_addition"
    STOCK_REMOVAL = "stock_removal"


# Same-day ordering: charges, then settlements, then everything else.
CHARGE_KINDS = frozenset(
    {
        EventKind.BILL,
        EventKind.SALESMAN_BILL,
        EventKind.PURCHASE,
        EventKind.FUEL_PURCHASE,
        EventKind.SALARY,
    }
)
SETTLEMENT_KINDS = frozenset(
    {
        EventKind.PAYMENT,
        EventKind.SALESMAN_PAYMENT,
        EventKind.WITHDRAWAL,
    }
)


def kind_rank(kind: EventKind) -> int:
    if kind in CHARGE_KINDS:
        return 0
    if kind in SETTLEMENT_KINDS:
        return 1
    return 2


@dataclass(frozen=True)
class LedgerEvent:
    """
    One normalized source record.

    Invariants:
    - signed_amount == sign * gross_amount for the account's sign rule
    - anomaly is None unless the amount was unusable, in which case both
      amounts are zero
    - gross_amount is the amount as recorded upstream. It is normally a
      magnitude but is negative for negative source amounts (refunds,
      corrections), which are kept as given rather than clamped
    """
    timestamp: datetime
    kind: EventKind
    signed_amount: Decimal
    gross_amount: Decimal
    reference: str
    source_index: int                 # position in its source list, for audit
    detail: Any = None
    anomaly: Optional[str] = None

    @property
    def day(self) -> date:
        return self.timestamp.date()

    @property
    def is_charge(self) -> bool:
        return self.kind in CHARGE_KINDS

    @property
    def is_settlement(self) -> bool:
        return self.kind in SETTLEMENT_KINDS


@dataclass(frozen=True)
class RecordWarning:
    """
    One input record that did not contribute its amount.

    kind is a plain string only for stored records whose kind is not an
    EventKind at all; index is the position among records of that kind.
    """
    kind: Union[EventKind, str]
    index: int
    reason: str

    @property
    def kind_name(self) -> str:
        return self.kind.value if isinstance(self.kind, EventKind) else self.kind


class LedgerInputError(ValueError):
    """Precondition violation; nothing was computed."""


class InvalidWindowError(LedgerInputError):
    pass
