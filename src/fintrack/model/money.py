"""
Decimal helpers for monetary amounts and share percentages.

Amounts are quantized to cents and percentages to four places, both with
ROUND_HALF_UP, matching how the invoice columns are stored.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from fintrack.config import MONEY_PLACES, PERCENTAGE_PLACES
from fintrack.errors import DomainRuleViolation

ZERO = Decimal("0.00")
ONE = Decimal("1")
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)
PERCENTAGE_QUANTUM = Decimal(1).scaleb(-PERCENTAGE_PLACES)


def to_decimal(value: Any) -> Decimal:
    """Convert str, int, float or Decimal to a finite Decimal without binary float noise."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise DomainRuleViolation(f"Not a valid decimal amount: {value!r}") from e
    if not result.is_finite():
        raise DomainRuleViolation(f"Amount must be a finite number: {value!r}")
    return result


def to_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def floor_money(value: Any) -> Decimal:
    """Truncate towards zero at cent precision."""
    return to_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)


def to_percentage(value: Any) -> Decimal:
    return to_decimal(value).quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP)


def same_money(a: Any, b: Any) -> bool:
    """Compare two amounts at cent precision."""
    return to_money(a) == to_money(b)


__all__ = [
    "MONEY_QUANTUM",
    "ONE",
    "PERCENTAGE_QUANTUM",
    "ZERO",
    "floor_money",
    "same_money",
    "to_decimal",
    "to_money",
    "to_percentage",
]
