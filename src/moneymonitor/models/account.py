"""Account model: cash holdings, bank accounts, e-wallets and credit lines."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ..constants import AccountKind
from ..money import ZERO, utcnow


class Account(SQLModel, table=True):
    """A money holding with an authoritative running balance.

    ``balance`` is only ever written by the balance mutator; it equals the
    signed sum of every transaction the engine applied to the account.
    """

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    bank_name: str = Field(nullable=False, max_length=80)
    account_name: str = Field(nullable=False, max_length=128)
    kind: str = Field(default=AccountKind.SAVINGS.value, nullable=False, max_length=32)
    balance: Decimal = Field(default=ZERO, max_digits=14, decimal_places=2, nullable=False)
    is_cash: bool = Field(default=False, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))

    @property
    def label(self) -> str:
        return f"{self.bank_name} - {self.account_name}"
