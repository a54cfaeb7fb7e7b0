from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.pumpledger.reconcile.engine import (  # noqa: E402
    AccountSnapshot,
    account_totals,
    balance_as_of,
    compute_account_ledger,
    opening_balance_for,
)
from backend.pumpledger.reconcile.events import EventKind, LedgerInputError  # noqa: E402
from backend.pumpledger.reconcile.normalize import EventSource  # noqa: E402
from backend.pumpledger.reconcile.profiles import (  # noqa: E402
    BANK,
    CUSTOMER,
    EMPLOYEE,
    SUPPLIER,
    TANK,
    get_profile,
)
from backend.pumpledger.reconcile.statement import statement_rows  # noqa: E402


def test_supplier_balance_is_opening_plus_purchases_minus_payments():
    sources = [
        EventSource(EventKind.PURCHASE, [{"purchase_date": date(2024, 5, 1), "net_amount": 1000, "invoice_number": "I-1"}]),
        EventSource(EventKind.FUEL_PURCHASE, [{"purchase_date": date(2024, 5, 2), "amount": 2500, "invoice_number": "F-1"}]),
        EventSource(EventKind.PAYMENT, [{"payment_date": date(2024, 5, 3), "amount": 3000, "reference_number": "NEFT"}]),
    ]

    res = compute_account_ledger(SUPPLIER, 200, date(2024, 5, 1), date(2024, 5, 31), sources)

    assert res.to_date.balance == Decimal("700.00")
    assert res.within.totals == {"purchased": Decimal("3500.00"), "paid": Decimal("3000.00")}


def test_bank_and_tank_and_employee_profiles():
    bank = compute_account_ledger(
        BANK,
        "1000",
        date(2024, 1, 1),
        date(2024, 1, 31),
        [
            EventSource(EventKind.DEPOSIT, [{"transaction_date": date(2024, 1, 3), "amount": 400}]),
            EventSource(EventKind.WITHDRAWAL, [{"transaction_date": date(2024, 1, 4), "amount": 150}]),
        ],
    )
    tank = compute_account_ledger(
        TANK,
        "5000",
        date(2024, 1, 1),
        date(2024, 1, 31),
        [
            EventSource(EventKind.STOCK_ADDITION, [{"transaction_date": date(2024, 1, 3), "volume": 12000}]),
            EventSource(EventKind.STOCK_REMOVAL, [{"transaction_date": date(2024, 1, 4), "volume": "3500.5"}]),
        ],
    )
    employee = compute_account_ledger(
        EMPLOYEE,
        0,
        date(2024, 1, 1),
        date(2024, 1, 31),
        [
            EventSource(EventKind.SALARY, [{"calculation_date": date(2024, 1, 31), "net_salary": 18000, "id": "S1"}]),
            EventSource(EventKind.PAYMENT, [{"payment_date": date(2024, 1, 15), "amount": 5000}]),
        ],
    )

    assert bank.to_date.balance == Decimal("1250.00")
    assert bank.within.totals == {"credited": Decimal("400.00"), "debited": Decimal("150.00")}
    assert tank.to_date.balance == Decimal("13499.50")
    assert employee.to_date.balance == Decimal("13000.00")
    assert [e.running_balance for e in employee.entries] == [Decimal("-5000.00"), Decimal("13000.00")]


def test_get_profile_is_case_insensitive_and_rejects_unknown():
    assert get_profile(" Customer ") is CUSTOMER
    with pytest.raises(LedgerInputError, match="unknown account type"):
        get_profile("wallet")


def test_balance_as_of_and_opening_balance_for():
    sources = [
        EventSource(EventKind.BILL, [
            {"bill_date": datetime(2024, 1, 5, 18, 0), "net_amount": 500},
            {"bill_date": date(2024, 1, 12), "net_amount": 80},
        ]),
        EventSource(EventKind.PAYMENT, [{"payment_date": date(2024, 1, 10), "amount": 300}]),
    ]

    assert balance_as_of(1000, sources, date(2024, 1, 4), CUSTOMER.sign_rule) == Decimal("1000.00")
    assert balance_as_of(1000, sources, date(2024, 1, 5), CUSTOMER.sign_rule) == Decimal("1500.00")
    assert balance_as_of(1000, sources, date(2024, 1, 10), CUSTOMER.sign_rule) == Decimal("1200.00")
    assert opening_balance_for(1000, sources, date(2024, 1, 12), CUSTOMER.sign_rule) == Decimal("1200.00")


def test_account_totals_per_account():
    accounts = [
        AccountSnapshot(
            account_id="c1",
            name="Sharma Transport",
            opening_balance=Decimal("100"),
            sources=[
                EventSource(EventKind.BILL, [{"bill_date": date(2024, 1, 1), "net_amount": 900}]),
                EventSource(EventKind.PAYMENT, [{"payment_date": date(2024, 1, 2), "amount": 400}]),
            ],
        ),
        AccountSnapshot(account_id="c2", name="New Customer", opening_balance=0, sources=[]),
    ]

    out = account_totals(CUSTOMER, accounts)

    assert [(a.account_id, a.balance) for a in out] == [("c1", Decimal("600.00")), ("c2", Decimal("0.00"))]
    assert out[0].totals == {"billed": Decimal("900.00"), "paid": Decimal("400.00")}
    assert out[1].totals == {"billed": Decimal("0.00"), "paid": Decimal("0.00")}


def test_statement_rows_fold_same_day_bill_and_payment():
    sources = [
        EventSource(EventKind.BILL, [
            {"bill_date": date(2024, 1, 5), "net_amount": 500, "bill_no": 11},
            {"bill_date": date(2024, 1, 6), "net_amount": 70, "bill_no": 12},
        ]),
        EventSource(EventKind.PAYMENT, [
            {"payment_date": date(2024, 1, 5), "amount": 200, "reference_number": "R1"},
            {"payment_date": date(2024, 1, 5), "amount": 100, "reference_number": "R2"},
            {"payment_date": date(2024, 1, 7), "amount": 70, "reference_number": "R3"},
        ]),
    ]
    res = compute_account_ledger(CUSTOMER, 0, date(2024, 1, 1), date(2024, 1, 31), sources)

    rows = statement_rows(res.entries, CUSTOMER)

    assert [r.badge for r in rows] == ["Bill+Payment", "Bill", "Payment"]
    assert rows[0].references == ("11", "R1", "R2")
    assert (rows[0].charge_amount, rows[0].settlement_amount) == (Decimal("500.00"), Decimal("300.00"))
    assert rows[0].running_balance == Decimal("200.00")
    assert rows[-1].running_balance == res.to_date.balance == Decimal("200.00")


def test_statement_rows_never_fold_bank_moves():
    sources = [
        EventSource(EventKind.DEPOSIT, [{"transaction_date": date(2024, 1, 5), "amount": 10}]),
        EventSource(EventKind.WITHDRAWAL, [{"transaction_date": date(2024, 1, 5), "amount": 5}]),
    ]
    res = compute_account_ledger(BANK, 0, date(2024, 1, 1), date(2024, 1, 31), sources)

    assert [r.badge for r in statement_rows(res.entries, BANK)] == ["Debit", "Credit"]
