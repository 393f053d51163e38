"""Ledger store protocol."""

from __future__ import annotations

from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, TypeVar

from sqlmodel import SQLModel

ModelT = TypeVar("ModelT", bound=SQLModel)


class LedgerStore(Protocol):
    """Document-style access to the ledger tables.

    Collections are SQLModel table classes and predicates are SQLAlchemy
    column expressions. Every financial mutation must happen inside
    ``run_atomic()`` so that the balance write and its companion records
    commit together or not at all.
    """

    def get(self, model: type[ModelT], entity_id: int) -> ModelT:
        """Return the entity or raise NotFound."""
        ...

    def query(
        self,
        model: type[ModelT],
        *criteria: Any,
        order_by: Iterable[Any] = (),
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        """Return entities matching all criteria."""
        ...

    def create(self, entity: ModelT) -> ModelT:
        """Insert the entity and return it with its id assigned."""
        ...

    def update(self, model: type[ModelT], entity_id: int, **fields: Any) -> ModelT:
        """Apply a partial update and return the entity."""
        ...

    def delete(self, model: type[ModelT], entity_id: int) -> None:
        """Remove the entity; raise NotFound when absent."""
        ...

    def compare_and_set(
        self,
        model: type[SQLModel],
        entity_id: int,
        field: str,
        expected: Decimal,
        new: Decimal,
        **also: Any,
    ) -> bool:
        """Write ``new`` (plus ``also``) only if ``field`` still holds ``expected``."""
        ...

    def run_atomic(self) -> AbstractContextManager["LedgerStore"]:
        """Group writes into one all-or-nothing unit."""
        ...
