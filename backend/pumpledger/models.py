from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.pumpledger.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_str() -> str:
    return str(uuid.uuid4())


# -------------------------
# Accounts
# -------------------------

class LedgerAccount(Base):
    """
    Anything with a running balance: customer, supplier, bank account,
    employee or tank. account_type selects the sign/category profile.
    """
    __tablename__ = "ledger_accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    account_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    opening_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    opening_balance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    records: Mapped[List["LedgerRecord"]] = relationship(
        "LedgerRecord",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# -------------------------
# Raw source records
# -------------------------

class LedgerRecord(Base):
    """
    A raw bill, payment, purchase, bank or tank transaction, or salary.

    amount is nullable on purpose: upstream data can be incomplete and the
    engine reports such rows instead of refusing them.
    """
    __tablename__ = "ledger_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("ledger_accounts.id", ondelete="CASCADE"),
        nullable=False,
    )

    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    account = relationship("LedgerAccount", back_populates="records")

    __table_args__ = (
        Index("ix_ledger_records_account_kind_occurred", "account_id", "kind", "occurred_at"),
    )
