"""
Reconcile - normalization layer.

Responsibility:
- Convert raw source records (bills, payments, purchases, bank and tank
  transactions, salaries) into LedgerEvents with a signed amount.

Design notes:
- This module must be PURE:
  - no file IO
  - no network calls
  - no global state mutation
- Every input record yields exactly one event, even when its amount is
  unusable. Such events carry zero amounts and an anomaly reason.
- Records may be mappings or plain objects; fields are read by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .events import EventKind, LedgerEvent, LedgerInputError, RecordWarning
from .money import parse_amount

logger = logging.getLogger(__name__)

SignRule = Callable[[EventKind], int]


@dataclass(frozen=True)
class FieldMap:
    date: str
    amount: str
    reference: str


# Field names the upstream services use for each record type.
DEFAULT_FIELDS: Dict[EventKind, FieldMap] = {
    EventKind.BILL: FieldMap("bill_date", "net_amount", "bill_no"),
    EventKind.SALESMAN_BILL: FieldMap("bill_date", "amount", "bill_no"),
    EventKind.PURCHASE: FieldMap("purchase_date", "net_amount", "invoice_number"),
    EventKind.FUEL_PURCHASE: FieldMap("purchase_date", "amount", "invoice_number"),
    EventKind.SALARY: FieldMap("calculation_date", "net_salary", "id"),
    EventKind.PAYMENT: FieldMap("payment_date", "amount", "reference_number"),
    EventKind.SALESMAN_PAYMENT: FieldMap("payment_date", "amount", "reference_number"),
    EventKind.WITHDRAWAL: FieldMap("transaction_date", "amount", "description"),
    EventKind.DEPOSIT: FieldMap("transaction_date", "amount", "description"),
    EventKind.STOCK_ADDITION: FieldMap("transaction_date", "volume", "description"),
    EventKind.STOCK_REMOVAL: FieldMap("transaction_date", "volume", "description"),
}


@dataclass(frozen=True)
class EventSource:
    """
    Raw records of one kind plus, optionally, the field names to read.
    """
    kind: EventKind
    records: Sequence[Any]
    fields: Optional[FieldMap] = None


@dataclass(frozen=True)
class NormalizeResult:
    events: List[LedgerEvent] = field(default_factory=list)
    warnings: List[RecordWarning] = field(default_factory=list)


def _read(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _as_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def resolve_sign(sign_rule: SignRule, kind: EventKind) -> int:
    sign = sign_rule(kind)
    if sign not in (1, -1):
        raise LedgerInputError(f"sign rule returned {sign!r} for {kind.value}; expected 1 or -1")
    return sign


def normalize(
    records: Sequence[Any],
    kind: EventKind,
    sign_rule: SignRule,
    fields: Optional[FieldMap] = None,
) -> NormalizeResult:
    fmap = fields or DEFAULT_FIELDS[kind]
    sign = resolve_sign(sign_rule, kind)

    out = NormalizeResult()
    for idx, record in enumerate(records):
        ts = _as_timestamp(_read(record, fmap.date))
        if ts is None:
            raise LedgerInputError(
                f"{kind.value} record {idx} has no usable '{fmap.date}' timestamp"
            )

        gross, problem = parse_amount(_read(record, fmap.amount))
        if problem:
            logger.warning("Skipping amount of %s record %s: %s", kind.value, idx, problem)
            out.warnings.append(RecordWarning(kind=kind, index=idx, reason=problem))
        elif gross < 0:
            logger.warning("Invariant guard: %s record %s has negative amount %s", kind.value, idx, gross)

        ref = _read(record, fmap.reference)
        out.events.append(
            LedgerEvent(
                timestamp=ts,
                kind=kind,
                signed_amount=gross if sign > 0 else -gross,
                gross_amount=gross,
                reference="" if ref is None else str(ref),
                source_index=idx,
                detail=record,
                anomaly=problem,
            )
        )

    return out


def normalize_sources(
    sources: Sequence[EventSource],
    sign_rule: SignRule,
) -> Tuple[List[List[LedgerEvent]], List[RecordWarning]]:
    event_lists: List[List[LedgerEvent]] = []
    warnings: List[RecordWarning] = []
    for src in sources:
        res = normalize(src.records, src.kind, sign_rule, src.fields)
        event_lists.append(res.events)
        warnings.extend(res.warnings)
    return event_lists, warnings
