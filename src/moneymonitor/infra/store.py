"""SQLModel implementation of the ledger store."""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterable, Iterator, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from ..errors import NotFound, StorageFailure
from ..logging_config import get_logger
from .database import SessionFactory

ModelT = TypeVar("ModelT", bound=SQLModel)

# Stored balances may carry binary float residue on SQLite; half a cent is
# the widest gap that still identifies the same two-place value.
CAS_TOLERANCE = Decimal("0.005")

logger = get_logger("store")


def _table_name(model: type[SQLModel]) -> str:
    return str(getattr(model, "__tablename__", model.__name__))


class SessionLedgerStore:
    """Store bound to one open session, i.e. one database transaction."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, model: type[ModelT], entity_id: int) -> ModelT:
        entity = self.session.get(model, entity_id)
        if entity is None:
            raise NotFound(_table_name(model), entity_id)
        return entity

    def query(
        self,
        model: type[ModelT],
        *criteria: Any,
        order_by: Iterable[Any] = (),
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        statement = select(model)
        if criteria:
            statement = statement.where(*criteria)
        for clause in order_by:
            statement = statement.order_by(clause)
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.exec(statement).all())

    def create(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        self.session.flush()
        return entity

    def update(self, model: type[ModelT], entity_id: int, **fields: Any) -> ModelT:
        entity = self.get(model, entity_id)
        for name, value in fields.items():
            if name == "id" or name not in model.model_fields:
                raise ValueError(f"{_table_name(model)} has no updatable field {name!r}")
            setattr(entity, name, value)
        self.session.add(entity)
        self.session.flush()
        return entity

    def delete(self, model: type[ModelT], entity_id: int) -> None:
        entity = self.get(model, entity_id)
        self.session.delete(entity)
        self.session.flush()

    def compare_and_set(
        self,
        model: type[SQLModel],
        entity_id: int,
        field: str,
        expected: Decimal,
        new: Decimal,
        **also: Any,
    ) -> bool:
        """Conditional single-statement update; ``also`` rides along on success."""

        column = getattr(model, field)
        self.session.flush()
        statement = (
            sa_update(model)
            .where(model.id == entity_id)  # type: ignore[attr-defined]
            .where(func.abs(column - expected, type_=column.type) < CAS_TOLERANCE)
            .values({field: new, **also})
        )
        result = self.session.connection().execute(statement)
        if result.rowcount != 1:
            return False
        cached = self.session.get(model, entity_id)
        if cached is not None:
            self.session.refresh(cached)
        return True

    @contextmanager
    def run_atomic(self) -> Iterator["SessionLedgerStore"]:
        # Already inside a unit: join it.
        yield self


class SQLModelLedgerStore:
    """Ledger store over a transactional session factory.

    Calls made directly on this object each run in their own short
    transaction; ``run_atomic()`` hands out a :class:`SessionLedgerStore`
    whose writes commit together.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @contextmanager
    def run_atomic(self) -> Iterator[SessionLedgerStore]:
        try:
            with self.session_factory() as session:
                yield SessionLedgerStore(session)
        except SQLAlchemyError as exc:
            logger.error("Atomic unit rolled back", exc_info=True)
            raise StorageFailure(f"Ledger commit failed: {exc.__class__.__name__}") from exc

    def get(self, model: type[ModelT], entity_id: int) -> ModelT:
        with self.run_atomic() as unit:
            return unit.get(model, entity_id)

    def query(
        self,
        model: type[ModelT],
        *criteria: Any,
        order_by: Iterable[Any] = (),
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        with self.run_atomic() as unit:
            return unit.query(model, *criteria, order_by=order_by, limit=limit)

    def create(self, entity: ModelT) -> ModelT:
        with self.run_atomic() as unit:
            return unit.create(entity)

    def update(self, model: type[ModelT], entity_id: int, **fields: Any) -> ModelT:
        with self.run_atomic() as unit:
            return unit.update(model, entity_id, **fields)

    def delete(self, model: type[ModelT], entity_id: int) -> None:
        with self.run_atomic() as unit:
            unit.delete(model, entity_id)

    def compare_and_set(
        self,
        model: type[SQLModel],
        entity_id: int,
        field: str,
        expected: Decimal,
        new: Decimal,
        **also: Any,
    ) -> bool:
        with self.run_atomic() as unit:
            return unit.compare_and_set(model, entity_id, field, expected, new, **also)
