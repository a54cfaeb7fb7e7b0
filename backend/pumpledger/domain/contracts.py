from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel


class LedgerEventContract(BaseModel):
    timestamp: datetime
    kind: str
    label: str
    signed_amount: Decimal
    gross_amount: Decimal
    reference: str
    source_index: int
    anomaly: Optional[str] = None


class LedgerEntryContract(LedgerEventContract):
    running_balance: Decimal
    charge_amount: Decimal
    settlement_amount: Decimal


class StatementRowContract(BaseModel):
    timestamp: datetime
    badge: str
    references: List[str]
    charge_amount: Decimal
    settlement_amount: Decimal
    running_balance: Decimal


class SummaryContract(BaseModel):
    starting_balance: Decimal
    balance: Decimal
    net: Decimal
    count: int
    totals: Dict[str, Decimal]


class RecordWarningContract(BaseModel):
    kind: str
    index: int
    reason: str


class LedgerResultContract(BaseModel):
    account_id: str
    account_type: str
    opening_balance: Decimal
    opening_balance_date: Optional[date] = None
    from_date: date
    to_date: date

    entries: List[LedgerEntryContract]
    rows: Optional[List[StatementRowContract]] = None

    before: SummaryContract
    within: SummaryContract
    to_date_summary: SummaryContract

    after_count: int
    skipped_count: int
    warnings: List[RecordWarningContract]


class AccountBalanceContract(BaseModel):
    account_id: str
    name: str
    account_type: str
    totals: Dict[str, Decimal]
    balance: Decimal
    skipped_count: int = 0


class BalanceAsOfContract(BaseModel):
    account_id: str
    as_of: date
    balance: Decimal
