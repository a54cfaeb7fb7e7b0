"""
Reconcile - ledger engine.

Responsibility:
- Turn an opening balance, a date window and raw per-kind records into one
  statement: in-window entries with running balances plus before / within /
  to-date summaries.

Design notes:
- Pure function of its inputs. No IO, no caches, no shared state; two calls
  with equal inputs return equal results.
- Pipeline: normalize -> merge -> apply balances (full history) ->
  partition -> summarize. Balances are always computed over the full
  history so in-window rows carry the true running balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from .events import LedgerInputError, RecordWarning
from .ledger import LedgerEntry, apply_balances
from .merge import merge
from .money import ZERO, exact_sums, parse_amount
from .normalize import EventSource, SignRule, normalize_sources
from .profiles import AccountProfile
from .summary import CategoryRule, Summary, summarize, summarize_part
from .window import DateLike, DateWindow, as_day, partition


@dataclass(frozen=True)
class LedgerInput:
    opening_balance: Any
    from_date: DateLike
    to_date: DateLike
    sources: Sequence[EventSource]
    sign_rule: SignRule
    category_rule: CategoryRule
    categories: Sequence[str] = ()


@dataclass(frozen=True)
class LedgerResult:
    opening_balance: Decimal
    window: DateWindow
    entries: List[LedgerEntry]
    before: Summary
    within: Summary
    to_date: Summary
    after_count: int = 0
    warnings: List[RecordWarning] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.warnings)

    @property
    def total_count(self) -> int:
        return self.to_date.count


def opening_amount(value: Any) -> Decimal:
    amount, problem = parse_amount(value if value is not None else ZERO)
    if problem:
        raise LedgerInputError(f"opening balance is unusable: {problem}")
    return amount


def compute_ledger(inp: LedgerInput) -> LedgerResult:
    window = DateWindow.of(inp.from_date, inp.to_date)
    opening = opening_amount(inp.opening_balance)

    event_lists, warnings = normalize_sources(inp.sources, inp.sign_rule)
    ordered = merge(event_lists)
    entries = apply_balances(opening, ordered)
    parts = partition(entries, window)
    sums = summarize(entries, parts, opening, inp.category_rule, inp.categories)

    return LedgerResult(
        opening_balance=opening,
        window=window,
        entries=parts.within,
        before=sums.before,
        within=sums.within,
        to_date=sums.to_date,
        after_count=len(parts.after),
        warnings=warnings,
    )


def compute_account_ledger(
    profile: AccountProfile,
    opening_balance: Any,
    from_date: DateLike,
    to_date: DateLike,
    sources: Sequence[EventSource],
) -> LedgerResult:
    return compute_ledger(
        LedgerInput(
            opening_balance=opening_balance,
            from_date=from_date,
            to_date=to_date,
            sources=sources,
            sign_rule=profile.sign_rule,
            category_rule=profile.category_rule,
            categories=profile.category_names,
        )
    )


def balance_as_of(
    opening_balance: Any,
    sources: Sequence[EventSource],
    as_of: DateLike,
    sign_rule: SignRule,
) -> Decimal:
    """
    Balance after every event dated on or before `as_of`.
    """
    cutoff = as_day(as_of)
    event_lists, _ = normalize_sources(sources, sign_rule)

    balance = opening_amount(opening_balance)
    with exact_sums():
        for ev in merge(event_lists):
            if ev.day > cutoff:
                break
            balance += ev.signed_amount
    return balance


def opening_balance_for(
    opening_balance: Any,
    sources: Sequence[EventSource],
    day: DateLike,
    sign_rule: SignRule,
) -> Decimal:
    # balance carried into `day`, i.e. as of the end of the previous day
    return balance_as_of(opening_balance, sources, as_day(day) - timedelta(days=1), sign_rule)


@dataclass(frozen=True)
class AccountSnapshot:
    account_id: str
    name: str
    opening_balance: Any
    sources: Sequence[EventSource]


@dataclass(frozen=True)
class AccountTotals:
    account_id: str
    name: str
    totals: Dict[str, Decimal]
    balance: Decimal
    warnings: List[RecordWarning] = field(default_factory=list)


def account_totals(profile: AccountProfile, accounts: Iterable[AccountSnapshot]) -> List[AccountTotals]:
    """
    Lifetime totals and current balance per account, for list screens.
    """
    out: List[AccountTotals] = []
    for acct in accounts:
        opening = opening_amount(acct.opening_balance)
        event_lists, warnings = normalize_sources(acct.sources, profile.sign_rule)
        entries = apply_balances(opening, merge(event_lists))
        summary = summarize_part(entries, opening, profile.category_rule, profile.category_names)
        out.append(
            AccountTotals(
                account_id=acct.account_id,
                name=acct.name,
                totals=summary.totals,
                balance=summary.balance,
                warnings=warnings,
            )
        )
    return out
