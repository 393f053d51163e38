"""Debt and debt payment entities."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ..money import ZERO, utcnow


class Debt(SQLModel, table=True):
    """A liability. ``current_balance`` stays within ``[0, total_amount]``."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128, index=True)
    description: str = Field(default="", max_length=255)
    total_amount: Decimal = Field(default=ZERO, max_digits=14, decimal_places=2, nullable=False)
    current_balance: Decimal = Field(
        default=ZERO, max_digits=14, decimal_places=2, nullable=False, index=True
    )
    interest_rate: Decimal = Field(default=ZERO, max_digits=6, decimal_places=2, nullable=False)
    deadline: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    # Set when the debt was opened by a "new loan" deposit.
    originating_transaction_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))


class DebtPayment(SQLModel, table=True):
    """Links a money-out transaction to the debt it paid down."""

    __tablename__: ClassVar[str] = "debt_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    debt_id: int = Field(nullable=False, index=True)
    transaction_id: int = Field(foreign_key="transaction.id", nullable=False, index=True)
    amount: Decimal = Field(max_digits=14, decimal_places=2, nullable=False)
    paid_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
