"""SQLModel definitions for ledger transactions and their direction detail."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional, Union

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ..constants import Direction, IncomeSource, SpendingCategory
from ..money import utcnow


class Transaction(SQLModel, table=True):
    """An immutable record of one money movement.

    ``amount`` is the unsigned magnitude; ``direction`` carries the sign.
    ``account_id``/``debt_id`` are plain columns so history outlives the
    account or debt it was recorded against.
    """

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    amount: Decimal = Field(max_digits=14, decimal_places=2, nullable=False)
    description: str = Field(default="", max_length=255)
    direction: str = Field(nullable=False, max_length=3, index=True)
    occurred_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=DateTime(timezone=True)
    )
    account_id: Optional[int] = Field(default=None, index=True)
    debt_id: Optional[int] = Field(default=None, index=True)
    payment_method: str = Field(default="", max_length=32)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction == Direction.IN.value else -self.amount


@dataclass(frozen=True)
class MoneyIn:
    source_type: IncomeSource
    debt_id: Optional[int] = None


@dataclass(frozen=True)
class MoneyOut:
    spending_category: SpendingCategory
    debt_id: Optional[int] = None


TransactionDetail = Union[MoneyIn, MoneyOut]


class TransactionSubrecord(SQLModel, table=True):
    """Direction-specific detail stored 1:1 with its transaction."""

    __tablename__: ClassVar[str] = "transaction_subrecord"

    MONEY_IN: ClassVar[str] = "money_in"
    MONEY_OUT: ClassVar[str] = "money_out"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    transaction_id: int = Field(
        foreign_key="transaction.id", nullable=False, unique=True, index=True
    )
    kind: str = Field(nullable=False, max_length=16)
    source_type: Optional[str] = Field(default=None, max_length=32)
    spending_category: Optional[str] = Field(default=None, max_length=32, index=True)
    debt_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))

    @classmethod
    def for_detail(
        cls, detail: TransactionDetail, *, transaction_id: int, user_id: int
    ) -> "TransactionSubrecord":
        if isinstance(detail, MoneyIn):
            return cls(
                user_id=user_id,
                transaction_id=transaction_id,
                kind=cls.MONEY_IN,
                source_type=detail.source_type.value,
                debt_id=detail.debt_id,
            )
        return cls(
            user_id=user_id,
            transaction_id=transaction_id,
            kind=cls.MONEY_OUT,
            spending_category=detail.spending_category.value,
            debt_id=detail.debt_id,
        )

    @property
    def variant(self) -> TransactionDetail:
        if self.kind == self.MONEY_IN:
            return MoneyIn(IncomeSource(self.source_type), self.debt_id)
        return MoneyOut(SpendingCategory(self.spending_category), self.debt_id)

    @property
    def tag(self) -> str:
        return (self.source_type if self.kind == self.MONEY_IN else self.spending_category) or ""
