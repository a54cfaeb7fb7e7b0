from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from backend.pumpledger.db import get_db
from backend.pumpledger.domain.contracts import AccountBalanceContract
from backend.pumpledger.services import account_service

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


# -------------------------
# Schemas
# -------------------------

class AccountCreate(BaseModel):
    account_type: str
    name: str = Field(..., min_length=1, max_length=200)
    opening_balance: Decimal = Decimal("0.00")
    opening_balance_date: Optional[date] = None


class AccountOut(BaseModel):
    id: str
    account_type: str
    name: str
    opening_balance: Decimal
    opening_balance_date: Optional[date] = None


class RecordIn(BaseModel):
    kind: str
    occurred_at: datetime
    # nullable: incomplete upstream rows are stored and reported, not rejected
    amount: Optional[Decimal] = None
    reference: Optional[str] = Field(None, max_length=120)
    details: Optional[Dict[str, Any]] = None


class RecordOut(BaseModel):
    id: str
    account_id: str
    kind: str
    occurred_at: datetime
    amount: Optional[Decimal] = None
    reference: Optional[str] = None


def _account_out(acct) -> AccountOut:
    return AccountOut(
        id=acct.id,
        account_type=acct.account_type,
        name=acct.name,
        opening_balance=acct.opening_balance,
        opening_balance_date=acct.opening_balance_date,
    )


# -------------------------
# Endpoints
# -------------------------

@router.post("", response_model=AccountOut, status_code=201)
def create_account(req: AccountCreate, db: Session = Depends(get_db)):
    acct = account_service.create_account(
        db,
        account_type=req.account_type,
        name=req.name,
        opening_balance=req.opening_balance,
        opening_balance_date=req.opening_balance_date,
    )
    return _account_out(acct)


@router.get("", response_model=List[AccountBalanceContract])
def list_accounts(
    account_type: str = Query(..., description="customer | supplier | bank | employee | tank"),
    db: Session = Depends(get_db),
):
    return account_service.list_accounts(db, account_type)


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: str, db: Session = Depends(get_db)):
    return _account_out(account_service.account_detail(db, account_id))


@router.post("/{account_id}/records", response_model=RecordOut, status_code=201)
def add_record(account_id: str, req: RecordIn, db: Session = Depends(get_db)):
    rec = account_service.add_record(
        db,
        account_id,
        kind=req.kind,
        occurred_at=req.occurred_at,
        amount=req.amount,
        reference=req.reference,
        details=req.details,
    )
    return RecordOut(
        id=rec.id,
        account_id=rec.account_id,
        kind=rec.kind,
        occurred_at=rec.occurred_at,
        amount=rec.amount,
        reference=rec.reference,
    )
