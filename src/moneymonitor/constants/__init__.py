"""Shared vocabularies."""

from .categories import (
    AccountKind,
    ChangeType,
    Direction,
    EntityKind,
    IncomeSource,
    PaymentMethod,
    SpendingCategory,
)

__all__ = [
    "AccountKind",
    "ChangeType",
    "Direction",
    "EntityKind",
    "IncomeSource",
    "PaymentMethod",
    "SpendingCategory",
]
