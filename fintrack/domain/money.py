"""Decimal-safe money arithmetic - amounts never touch binary floats"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List

from fintrack.domain.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """
    Parse an amount and quantize it to cents (ROUND_HALF_UP).

    Floats are rejected: they have already lost precision by the time they
    reach us.

    Raises:
        ValidationError: On floats, non-numeric strings, NaN or infinity
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise ValidationError(f"Amount must be a decimal string or integer, got {type(value).__name__}")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_positive_money(value: Decimal | int | str, field: str = "amount") -> Decimal:
    """Parse an amount that must be strictly positive after rounding"""
    amount = to_money(value)
    if amount <= ZERO:
        raise ValidationError(f"{field} must be positive, got {amount}")
    return amount


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO).quantize(CENT)


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def split_evenly(total: Decimal, count: int) -> List[Decimal]:
    """
    Split a total into `count` legs of whole cents.

    Every leg gets floor(total / count); leftover cents go to the first leg so
    the legs always sum to the total exactly.

    Example:
        100.00 / 3 → [33.34, 33.33, 33.33]
    """
    if count < 1:
        raise ValidationError(f"Installment count must be at least 1, got {count}")

    total_cents = to_cents(total)
    base, remainder = divmod(total_cents, count)
    return [from_cents(base + (remainder if i == 0 else 0)) for i in range(count)]
