"""Currency parsing, rounding and comparison helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from .errors import InvalidAmount

MoneyInput = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# Balance changes smaller than one cent are floating point noise.
EPSILON = Decimal("0.01")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_money(value: MoneyInput | None) -> Decimal:
    """Return ``value`` as a two-place Decimal or raise InvalidAmount."""

    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"Not a money amount: {value!r}")
    try:
        if isinstance(value, float):
            # str() avoids carrying binary float noise into the Decimal
            parsed = Decimal(str(value))
        elif isinstance(value, str):
            parsed = Decimal(value.strip().replace(",", ""))
        else:
            parsed = Decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmount(f"Not a money amount: {value!r}") from exc
    if not parsed.is_finite():
        raise InvalidAmount(f"Not a money amount: {value!r}")
    try:
        return quantize(parsed)
    except InvalidOperation as exc:
        raise InvalidAmount(f"Amount out of range: {value!r}") from exc


def positive_amount(value: MoneyInput | None) -> Decimal:
    """Parse an amount that must be strictly greater than zero."""

    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmount(f"Amount must be greater than zero, got {amount}")
    return amount


def is_negligible(delta: Decimal) -> bool:
    return abs(delta) < EPSILON


def money_equal(left: Decimal, right: Decimal) -> bool:
    return is_negligible(left - right)


def utcnow() -> datetime:
    """Engine-assigned timestamp, timezone-aware UTC."""

    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values (read back from SQLite) and convert aware ones."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


__all__ = [
    "CENTS",
    "EPSILON",
    "ZERO",
    "as_utc",
    "is_negligible",
    "money_equal",
    "positive_amount",
    "quantize",
    "to_money",
    "utcnow",
]
