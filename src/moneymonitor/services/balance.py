"""Balance mutator: the only writer of account and debt running balances."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel

from ..constants import ChangeType, EntityKind
from ..domain.store import LedgerStore
from ..errors import StorageFailure
from ..logging_config import get_logger
from ..models import Account, AuditEntry, Debt
from ..money import ZERO, is_negligible, quantize, utcnow

logger = get_logger("balance")

_BALANCE_FIELDS: dict[EntityKind, tuple[type[SQLModel], str]] = {
    EntityKind.ACCOUNT: (Account, "balance"),
    EntityKind.DEBT: (Debt, "current_balance"),
}


@dataclass(frozen=True, slots=True)
class BalanceChange:
    """Outcome of one ``apply_delta`` call."""

    previous_balance: Decimal
    new_balance: Decimal
    applied: bool
    audit_entry_id: Optional[int] = None

    @property
    def change_amount(self) -> Decimal:
        return abs(self.new_balance - self.previous_balance)


class BalanceMutator:
    """Applies signed deltas to accounts and debts.

    Accounts have no floor (callers check funds before withdrawing); debts
    are clamped at zero. Each applied delta writes exactly one audit entry;
    deltas under one cent are ignored and write nothing.
    """

    def apply_delta(
        self,
        store: LedgerStore,
        kind: EntityKind,
        entity_id: int,
        delta: Decimal,
        *,
        change_type: ChangeType,
        transaction_id: Optional[int] = None,
    ) -> BalanceChange:
        kind = EntityKind(kind)
        model, field = _BALANCE_FIELDS[kind]
        entity = store.get(model, entity_id)
        previous = quantize(Decimal(getattr(entity, field)))

        if is_negligible(delta):
            return BalanceChange(previous_balance=previous, new_balance=previous, applied=False)

        new_balance = quantize(previous + delta)
        if kind is EntityKind.DEBT and new_balance < ZERO:
            new_balance = ZERO
        if new_balance == previous:
            # Paying an already-settled debt moves nothing.
            return BalanceChange(previous_balance=previous, new_balance=previous, applied=False)

        swapped = store.compare_and_set(
            model, entity_id, field, previous, new_balance, updated_at=utcnow()
        )
        if not swapped:
            logger.warning(
                "Balance changed concurrently",
                extra={"entity_kind": kind.value, "entity_id": entity_id, "expected": str(previous)},
            )
            raise StorageFailure(f"{kind.value} {entity_id} balance changed concurrently; retry")

        entry = store.create(
            AuditEntry(
                user_id=entity.user_id,
                entity_kind=kind.value,
                entity_id=entity_id,
                previous_balance=previous,
                new_balance=new_balance,
                change_amount=abs(new_balance - previous),
                change_type=ChangeType(change_type).value,
                transaction_id=transaction_id,
            )
        )
        return BalanceChange(
            previous_balance=previous,
            new_balance=new_balance,
            applied=True,
            audit_entry_id=entry.id,
        )
