"""Decimal money helpers."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .errors import InvalidAmount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """Coerce *value* to a Decimal rounded half-up to cents.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.10")`` rather than
    its binary expansion.
    """

    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmount(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def positive_money(value: MoneyLike, *, field: str = "amount") -> Decimal:
    """Return *value* as money, raising ``InvalidAmount`` unless it is > 0."""

    amount = to_money(value)
    if amount <= 0:
        raise InvalidAmount(f"{field} must be greater than zero, got {amount}")
    return amount


def non_negative_money(value: MoneyLike, *, field: str = "amount") -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise InvalidAmount(f"{field} cannot be negative, got {amount}")
    return amount


__all__ = [
    "CENT",
    "ZERO",
    "non_negative_money",
    "positive_money",
    "to_money",
]
