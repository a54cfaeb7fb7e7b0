"""
Reconcile - money helpers.

All ledger arithmetic happens on Decimal values quantized to two places.
Amounts are parsed once at the normalization boundary; everything after that
is exact Decimal addition.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal, Inexact, InvalidOperation, localcontext
import math
from typing import Any, Iterator, Literal, Optional, Tuple

from .events import LedgerInputError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest magnitude a single record may carry; matches the Numeric(14, 2) columns.
MAX_AMOUNT = Decimal("999999999999.99")

AmountProblem = Literal["missing_amount", "invalid_amount", "non_finite_amount"]


def parse_amount(value: Any) -> Tuple[Decimal, Optional[AmountProblem]]:
    """
    Turn an upstream amount into a quantized Decimal.

    Never raises. Returns (ZERO, reason) when the value cannot be used,
    including magnitudes above MAX_AMOUNT.
    """
    if value is None:
        return ZERO, "missing_amount"
    if isinstance(value, bool):
        return ZERO, "invalid_amount"

    if isinstance(value, float):
        if not math.isfinite(value):
            return ZERO, "non_finite_amount"
        # repr-based conversion keeps 0.1 as 0.1 rather than its binary expansion
        value = repr(value)

    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return ZERO, "missing_amount"

    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO, "invalid_amount"

    if not parsed.is_finite():
        return ZERO, "non_finite_amount"

    try:
        amount = parsed.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO, "invalid_amount"
    if abs(amount) > MAX_AMOUNT:
        return ZERO, "invalid_amount"
    return amount, None


@contextmanager
def exact_sums() -> Iterator[None]:
    """
    Decimal context for balance and total folds.

    Any addition that would have to round raises LedgerInputError instead
    of yielding an approximate balance.
    """
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            yield
        except Inexact:
            raise LedgerInputError("ledger sum exceeds exact decimal precision") from None
