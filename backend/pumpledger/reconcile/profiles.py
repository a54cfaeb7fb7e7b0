"""
Reconcile - account profiles.

Each account type fixes which event kinds it accepts, the sign each kind
contributes to the running balance, and the category each kind is totalled
under. A positive balance always means "outstanding in the account's
natural direction":

- customer: customer owes the pump        (bills +, payments -)
- supplier: the pump owes the supplier    (purchases +, payments -)
- bank:     funds held in the account     (deposits +, withdrawals -)
- employee: the pump owes the employee    (salaries +, payments -)
- tank:     litres in the tank            (additions +, removals -)

Customer and supplier polarity mirror each other; both read as "amount
still owed" on their own screens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .events import EventKind, LedgerEvent, LedgerInputError


@dataclass(frozen=True)
class AccountProfile:
    account_type: str
    signs: Dict[EventKind, int]
    categories: Dict[EventKind, str]
    labels: Dict[EventKind, str]
    combined_label: Optional[str]

    @property
    def kinds(self) -> Tuple[EventKind, ...]:
        return tuple(self.signs)

    @property
    def category_names(self) -> List[str]:
        # declared order, deduplicated
        return list(dict.fromkeys(self.categories.values()))

    def supports(self, kind: EventKind) -> bool:
        return kind in self.signs

    def sign_rule(self, kind: EventKind) -> int:
        try:
            return self.signs[kind]
        except KeyError:
            raise LedgerInputError(
                f"{kind.value} events are not valid on {self.account_type} accounts"
            ) from None

    def category_rule(self, event: LedgerEvent) -> str:
        return self.categories.get(event.kind, "other")

    def label(self, kind: EventKind) -> str:
        return self.labels.get(kind, kind.value.replace("_", " ").title())


CUSTOMER = AccountProfile(
    account_type="customer",
    signs={
        EventKind.BILL: 1,
        EventKind.SALESMAN_BILL: 1,
        EventKind.PAYMENT: -1,
        EventKind.SALESMAN_PAYMENT: -1,
    },
    categories={
        EventKind.BILL: "billed",
        EventKind.SALESMAN_BILL: "billed",
        EventKind.PAYMENT: "paid",
        EventKind.SALESMAN_PAYMENT: "paid",
    },
    labels={
        EventKind.BILL: "Bill",
        EventKind.SALESMAN_BILL: "Salesman Bill",
        EventKind.PAYMENT: "Payment",
        EventKind.SALESMAN_PAYMENT: "Salesman Payment",
    },
    combined_label="Bill+Payment",
)

SUPPLIER = AccountProfile(
    account_type="supplier",
    signs={
        EventKind.PURCHASE: 1,
        EventKind.FUEL_PURCHASE: 1,
        EventKind.PAYMENT: -1,
    },
    categories={
        EventKind.PURCHASE: "purchased",
        EventKind.FUEL_PURCHASE: "purchased",
        EventKind.PAYMENT: "paid",
    },
    labels={
        EventKind.PURCHASE: "Purchase",
        EventKind.FUEL_PURCHASE: "Fuel Purchase",
        EventKind.PAYMENT: "Payment",
    },
    combined_label="Purchase+Payment",
)

BANK = AccountProfile(
    account_type="bank",
    signs={
        EventKind.DEPOSIT: 1,
        EventKind.WITHDRAWAL: -1,
    },
    categories={
        EventKind.DEPOSIT: "credited",
        EventKind.WITHDRAWAL: "debited",
    },
    labels={
        EventKind.DEPOSIT: "Credit",
        EventKind.WITHDRAWAL: "Debit",
    },
    combined_label=None,
)

EMPLOYEE = AccountProfile(
    account_type="employee",
    signs={
        EventKind.SALARY: 1,
        EventKind.PAYMENT: -1,
    },
    categories={
        EventKind.SALARY: "salary",
        EventKind.PAYMENT: "paid",
    },
    labels={
        EventKind.SALARY: "Salary Calculated",
        EventKind.PAYMENT: "Payment Made",
    },
    combined_label="Salary+Payment",
)

TANK = AccountProfile(
    account_type="tank",
    signs={
        EventKind.STOCK_ADDITION: 1,
        EventKind.STOCK_REMOVAL: -1,
    },
    categories={
        EventKind.STOCK_ADDITION: "added",
        EventKind.STOCK_REMOVAL: "removed",
    },
    labels={
        EventKind.STOCK_ADDITION: "Addition",
        EventKind.STOCK_REMOVAL: "Removal",
    },
    combined_label=None,
)

PROFILES: Dict[str, AccountProfile] = {
    p.account_type: p for p in (CUSTOMER, SUPPLIER, BANK, EMPLOYEE, TANK)
}


def get_profile(account_type: str) -> AccountProfile:
    try:
        return PROFILES[(account_type or "").strip().lower()]
    except KeyError:
        raise LedgerInputError(f"unknown account type: {account_type!r}") from None
