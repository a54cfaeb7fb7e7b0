from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.pumpledger.db import get_db
from backend.pumpledger.domain.contracts import BalanceAsOfContract, LedgerResultContract
from backend.pumpledger.services import ledger_service

router = APIRouter(prefix="/api/ledger", tags=["ledger"])


@router.get("/{account_id}", response_model=LedgerResultContract)
def account_ledger(
    account_id: str,
    from_date: date = Query(..., description="Inclusive start date (YYYY-MM-DD)"),
    to_date: date = Query(..., description="Inclusive end date (YYYY-MM-DD)"),
    combined: bool = Query(False, description="Fold same-day charge+settlement into one row"),
    db: Session = Depends(get_db),
):
    return ledger_service.account_ledger(db, account_id, from_date, to_date, combined=combined)


@router.get("/{account_id}/balance", response_model=BalanceAsOfContract)
def account_balance(
    account_id: str,
    as_of: date = Query(..., description="Inclusive day (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
):
    return ledger_service.account_balance_as_of(db, account_id, as_of)
