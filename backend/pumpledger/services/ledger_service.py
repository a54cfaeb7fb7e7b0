from __future__ import annotations

from dataclasses import replace
from datetime import date
import logging
import os
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.pumpledger.models import LedgerAccount, LedgerRecord
from backend.pumpledger.reconcile.engine import (
    LedgerResult,
    balance_as_of,
    compute_account_ledger,
)
from backend.pumpledger.reconcile.events import EventKind, LedgerInputError, RecordWarning
from backend.pumpledger.reconcile.ledger import (
    LedgerEntry,
    LedgerIntegrityError,
    check_ledger_integrity,
)
from backend.pumpledger.reconcile.normalize import EventSource, FieldMap
from backend.pumpledger.reconcile.profiles import AccountProfile, get_profile
from backend.pumpledger.reconcile.statement import statement_rows
from backend.pumpledger.reconcile.summary import Summary

logger = logging.getLogger(__name__)

# Stored records share one column layout regardless of kind.
RECORD_FIELDS = FieldMap(date="occurred_at", amount="amount", reference="reference")

UNSUPPORTED_KIND = "unsupported_kind"


def _strict_integrity() -> bool:
    return os.getenv("LEDGER_STRICT_INTEGRITY", "1").strip().lower() not in {"0", "false", "no", "off"}


def require_account(db: Session, account_id: str) -> LedgerAccount:
    acct = db.get(LedgerAccount, account_id)
    if not acct:
        raise HTTPException(status_code=404, detail="account not found")
    return acct


def profile_for(acct: LedgerAccount) -> AccountProfile:
    try:
        return get_profile(acct.account_type)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def account_sources(
    db: Session,
    acct: LedgerAccount,
    profile: AccountProfile,
) -> Tuple[List[EventSource], List[RecordWarning]]:
    """
    Full record history for the account, one source per kind the profile accepts.

    Records of kinds the profile does not accept are left out; each one is
    logged and returned as an `unsupported_kind` warning.
    """
    stmt = (
        select(LedgerRecord)
        .where(LedgerRecord.account_id == acct.id)
        .order_by(LedgerRecord.occurred_at.asc(), LedgerRecord.created_at.asc(), LedgerRecord.id.asc())
    )
    rows = db.execute(stmt).scalars().all()

    by_kind: Dict[EventKind, List[LedgerRecord]] = {kind: [] for kind in profile.kinds}
    foreign: Dict[str, int] = {}
    warnings: List[RecordWarning] = []
    for row in rows:
        try:
            kind = EventKind(row.kind)
        except ValueError:
            kind = None
        if kind is None or kind not in by_kind:
            logger.warning("Ignoring %s record %s on %s account %s", row.kind, row.id, acct.account_type, acct.id)
            idx = foreign.get(row.kind, 0)
            foreign[row.kind] = idx + 1
            warnings.append(RecordWarning(kind=kind or row.kind, index=idx, reason=UNSUPPORTED_KIND))
            continue
        by_kind[kind].append(row)

    sources = [EventSource(kind=kind, records=recs, fields=RECORD_FIELDS) for kind, recs in by_kind.items()]
    return sources, warnings


# -------------------------
# Serialization
# -------------------------

def entry_to_dict(entry: LedgerEntry, profile: AccountProfile) -> Dict[str, Any]:
    ev = entry.event
    return {
        "timestamp": ev.timestamp,
        "kind": ev.kind.value,
        "label": profile.label(ev.kind),
        "signed_amount": ev.signed_amount,
        "gross_amount": ev.gross_amount,
        "reference": ev.reference,
        "source_index": ev.source_index,
        "anomaly": ev.anomaly,
        "running_balance": entry.running_balance,
        "charge_amount": entry.charge_amount,
        "settlement_amount": entry.settlement_amount,
    }


def summary_to_dict(summary: Summary) -> Dict[str, Any]:
    return {
        "starting_balance": summary.starting_balance,
        "balance": summary.balance,
        "net": summary.net,
        "count": summary.count,
        "totals": dict(summary.totals),
    }


def result_to_dict(
    acct: LedgerAccount,
    profile: AccountProfile,
    result: LedgerResult,
    combined: bool = False,
) -> Dict[str, Any]:
    rows = None
    if combined:
        rows = [
            {
                "timestamp": row.timestamp,
                "badge": row.badge,
                "references": list(row.references),
                "charge_amount": row.charge_amount,
                "settlement_amount": row.settlement_amount,
                "running_balance": row.running_balance,
            }
            for row in statement_rows(result.entries, profile)
        ]

    return {
        "account_id": acct.id,
        "account_type": profile.account_type,
        "opening_balance": result.opening_balance,
        "opening_balance_date": acct.opening_balance_date,
        "from_date": result.window.from_date,
        "to_date": result.window.to_date,
        "entries": [entry_to_dict(e, profile) for e in result.entries],
        "rows": rows,
        "before": summary_to_dict(result.before),
        "within": summary_to_dict(result.within),
        "to_date_summary": summary_to_dict(result.to_date),
        "after_count": result.after_count,
        "skipped_count": result.skipped_count,
        "warnings": [
            {"kind": w.kind_name, "index": w.index, "reason": w.reason}
            for w in result.warnings
        ],
    }


# -------------------------
# Operations
# -------------------------

def _verify(acct: LedgerAccount, result: LedgerResult) -> None:
    try:
        check_ledger_integrity(result.entries, opening_balance=result.before.balance)
    except LedgerIntegrityError:
        logger.exception("Ledger integrity check failed for account %s", acct.id)
        raise HTTPException(status_code=500, detail="ledger integrity check failed")


def account_ledger(
    db: Session,
    account_id: str,
    from_date: date,
    to_date: date,
    combined: bool = False,
) -> Dict[str, Any]:
    acct = require_account(db, account_id)
    profile = profile_for(acct)
    sources, unsupported = account_sources(db, acct, profile)

    try:
        result = compute_account_ledger(profile, acct.opening_balance, from_date, to_date, sources)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if _strict_integrity():
        _verify(acct, result)

    if unsupported:
        result = replace(result, warnings=[*result.warnings, *unsupported])

    logger.info(
        "Ledger computed account=%s window=%s..%s entries=%s skipped=%s",
        acct.id,
        result.window.from_date,
        result.window.to_date,
        len(result.entries),
        result.skipped_count,
    )
    return result_to_dict(acct, profile, result, combined=combined)


def account_balance_as_of(db: Session, account_id: str, as_of: date) -> Dict[str, Any]:
    acct = require_account(db, account_id)
    profile = profile_for(acct)
    sources, _ = account_sources(db, acct, profile)

    try:
        bal = balance_as_of(acct.opening_balance, sources, as_of, profile.sign_rule)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return {"account_id": acct.id, "as_of": as_of, "balance": bal}
