"""Transaction recorder: writes a transaction together with its detail row."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..constants import Direction, IncomeSource, PaymentMethod, SpendingCategory
from ..constants.categories import category_for
from ..domain.store import LedgerStore
from ..errors import InvalidAmount, InvalidInput, StorageFailure
from ..models import MoneyIn, MoneyOut, Transaction, TransactionSubrecord
from ..models.transaction import TransactionDetail
from ..money import ZERO, to_money, utcnow


@dataclass(frozen=True, slots=True)
class RecordedTransaction:
    transaction: Transaction
    subrecord: TransactionSubrecord

    @property
    def id(self) -> int:
        if self.transaction.id is None:
            raise StorageFailure("Transaction has no id; it was never flushed")
        return self.transaction.id

    @property
    def detail(self) -> TransactionDetail:
        return self.subrecord.variant


class TransactionRecorder:
    """Records the narrative of a money movement; never touches balances."""

    def record(
        self,
        store: LedgerStore,
        *,
        user_id: int,
        direction: Direction | str,
        amount: Decimal,
        description: str,
        account_id: Optional[int],
        category: IncomeSource | SpendingCategory | str,
        payment_method: PaymentMethod | str,
        debt_id: Optional[int] = None,
    ) -> RecordedTransaction:
        try:
            direction = Direction(direction)
            tag = category_for(direction, category)
            method = PaymentMethod(payment_method)
        except ValueError as exc:
            raise InvalidInput(str(exc)) from exc

        amount = to_money(amount)
        if amount <= ZERO:
            raise InvalidAmount(f"Transaction amount must be greater than zero, got {amount}")

        transaction = store.create(
            Transaction(
                user_id=user_id,
                amount=amount,
                description=(description or "").strip(),
                direction=direction.value,
                occurred_at=utcnow(),
                account_id=account_id,
                debt_id=debt_id,
                payment_method=method.value,
            )
        )
        detail: TransactionDetail = (
            MoneyIn(source_type=tag, debt_id=debt_id)  # type: ignore[arg-type]
            if direction is Direction.IN
            else MoneyOut(spending_category=tag, debt_id=debt_id)  # type: ignore[arg-type]
        )
        subrecord = store.create(
            TransactionSubrecord.for_detail(
                detail, transaction_id=transaction.id, user_id=user_id  # type: ignore[arg-type]
            )
        )
        return RecordedTransaction(transaction=transaction, subrecord=subrecord)
