"""User model owning every ledger record."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from ..money import utcnow


class User(SQLModel, table=True):
    """Ledger owner. Credentials live with the identity provider, not here."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(nullable=False, unique=True, index=True, max_length=255)
    display_name: str = Field(default="", max_length=128)
    user_type: str = Field(default="standard", nullable=False, max_length=16)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
