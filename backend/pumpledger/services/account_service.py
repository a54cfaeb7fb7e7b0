from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.pumpledger.models import LedgerAccount, LedgerRecord
from backend.pumpledger.reconcile.engine import AccountSnapshot, account_totals
from backend.pumpledger.reconcile.events import EventKind, LedgerInputError
from backend.pumpledger.reconcile.money import parse_amount
from backend.pumpledger.reconcile.profiles import get_profile
from backend.pumpledger.services.ledger_service import (
    account_sources,
    profile_for,
    require_account,
)

logger = logging.getLogger(__name__)


def create_account(
    db: Session,
    *,
    account_type: str,
    name: str,
    opening_balance: Decimal,
    opening_balance_date: Optional[date] = None,
) -> LedgerAccount:
    try:
        profile = get_profile(account_type)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    opening, problem = parse_amount(opening_balance)
    if problem:
        raise HTTPException(status_code=422, detail=f"opening balance is unusable: {problem}")

    acct = LedgerAccount(
        account_type=profile.account_type,
        name=name.strip(),
        opening_balance=opening,
        opening_balance_date=opening_balance_date,
    )
    db.add(acct)
    db.commit()
    db.refresh(acct)
    return acct


def add_record(
    db: Session,
    account_id: str,
    *,
    kind: str,
    occurred_at: datetime,
    amount: Optional[Decimal],
    reference: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> LedgerRecord:
    acct = require_account(db, account_id)
    profile = profile_for(acct)

    try:
        event_kind = EventKind(kind)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"unknown record kind: {kind}")
    if not profile.supports(event_kind):
        raise HTTPException(
            status_code=422,
            detail=f"{event_kind.value} records are not valid on {profile.account_type} accounts",
        )

    rec = LedgerRecord(
        account_id=acct.id,
        kind=event_kind.value,
        occurred_at=occurred_at,
        amount=amount,
        reference=reference,
        details=details,
    )
    db.add(rec)
    db.commit()
    db.refresh(rec)
    return rec


def list_accounts(db: Session, account_type: str) -> List[Dict[str, Any]]:
    """
    Lifetime totals and balance per account of one type.
    """
    try:
        profile = get_profile(account_type)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    stmt = (
        select(LedgerAccount)
        .where(LedgerAccount.account_type == profile.account_type)
        .order_by(LedgerAccount.name.asc(), LedgerAccount.id.asc())
    )
    accounts = db.execute(stmt).scalars().all()

    snapshots: List[AccountSnapshot] = []
    unsupported: Dict[str, int] = {}
    for acct in accounts:
        sources, foreign = account_sources(db, acct, profile)
        unsupported[acct.id] = len(foreign)
        snapshots.append(
            AccountSnapshot(
                account_id=acct.id,
                name=acct.name,
                opening_balance=acct.opening_balance,
                sources=sources,
            )
        )

    try:
        per_account = account_totals(profile, snapshots)
    except LedgerInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    out: List[Dict[str, Any]] = []
    for totals in per_account:
        skipped = len(totals.warnings) + unsupported[totals.account_id]
        if skipped:
            logger.warning("Account %s has %s unusable records", totals.account_id, skipped)
        out.append(
            {
                "account_id": totals.account_id,
                "name": totals.name,
                "account_type": profile.account_type,
                "totals": totals.totals,
                "balance": totals.balance,
                "skipped_count": skipped,
            }
        )
    return out


def account_detail(db: Session, account_id: str) -> LedgerAccount:
    return require_account(db, account_id)
