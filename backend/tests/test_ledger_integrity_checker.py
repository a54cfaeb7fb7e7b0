from dataclasses import replace
from datetime import date
from decimal import Decimal
from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.pumpledger.reconcile.events import EventKind  # noqa: E402
from backend.pumpledger.reconcile.ledger import (  # noqa: E402
    LedgerIntegrityError,
    apply_balances,
    check_ledger_integrity,
)
from backend.pumpledger.reconcile.merge import merge  # noqa: E402
from backend.pumpledger.reconcile.normalize import normalize  # noqa: E402
from backend.pumpledger.reconcile.profiles import SUPPLIER  # noqa: E402


def _ledger(opening="10.00"):
    purchases = normalize(
        [
            {"purchase_date": date(2024, 3, 1), "net_amount": 100, "invoice_number": "A"},
            {"purchase_date": date(2024, 3, 3), "net_amount": 60, "invoice_number": "B"},
        ],
        EventKind.PURCHASE,
        SUPPLIER.sign_rule,
    ).events
    payments = normalize(
        [{"payment_date": date(2024, 3, 2), "amount": 40, "reference_number": "P"}],
        EventKind.PAYMENT,
        SUPPLIER.sign_rule,
    ).events
    return apply_balances(Decimal(opening), merge([purchases, payments]))


def test_check_ledger_integrity_passes_known_good_ledger():
    summary = check_ledger_integrity(_ledger(), opening_balance=Decimal("10.00"))

    assert summary["rows"] == 3
    assert summary["net_movement"] == Decimal("120.00")
    assert summary["charge_total"] == Decimal("160.00")
    assert summary["settlement_total"] == Decimal("40.00")
    assert summary["closing_balance"] == Decimal("130.00")


def test_check_ledger_integrity_empty_ledger_closes_at_opening():
    summary = check_ledger_integrity([], opening_balance=Decimal("75.00"))

    assert summary["rows"] == 0
    assert summary["closing_balance"] == Decimal("75.00")


def test_check_ledger_integrity_fails_on_discontinuous_balance():
    ledger = _ledger()
    bad = [ledger[0], replace(ledger[1], running_balance=Decimal("999.00")), ledger[2]]

    with pytest.raises(LedgerIntegrityError, match="running balance mismatch at row 1"):
        check_ledger_integrity(bad, opening_balance=Decimal("10.00"))


def test_check_ledger_integrity_fails_on_wrong_opening_balance():
    with pytest.raises(LedgerIntegrityError, match="running balance mismatch at row 0"):
        check_ledger_integrity(_ledger(), opening_balance=Decimal("0.00"))


def test_check_ledger_integrity_fails_on_ordering():
    ledger = _ledger()
    swapped = [ledger[1], ledger[0], ledger[2]]

    with pytest.raises(LedgerIntegrityError, match="deterministically ordered"):
        check_ledger_integrity(swapped, opening_balance=Decimal("110.00"))


def test_check_ledger_integrity_fails_on_bad_split():
    ledger = _ledger()
    bad = [replace(ledger[0], settlement_amount=Decimal("1.00")), ledger[1], ledger[2]]

    with pytest.raises(LedgerIntegrityError, match="split does not match gross"):
        check_ledger_integrity(bad, opening_balance=Decimal("10.00"))
