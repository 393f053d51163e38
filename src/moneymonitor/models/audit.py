"""Append-only balance change log."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ..money import utcnow


class AuditEntry(SQLModel, table=True):
    """One balance change on an account or a debt. Never updated or deleted."""

    __tablename__: ClassVar[str] = "audit_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    entity_kind: str = Field(nullable=False, max_length=16, index=True)
    entity_id: int = Field(nullable=False, index=True)
    previous_balance: Decimal = Field(max_digits=14, decimal_places=2, nullable=False)
    new_balance: Decimal = Field(max_digits=14, decimal_places=2, nullable=False)
    change_amount: Decimal = Field(max_digits=14, decimal_places=2, nullable=False)
    change_type: str = Field(nullable=False, max_length=32)
    transaction_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=DateTime(timezone=True)
    )
