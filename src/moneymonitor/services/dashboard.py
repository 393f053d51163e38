"""Read-only dashboard aggregates for one user."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from ..constants import Direction
from ..domain.store import LedgerStore
from ..errors import Unauthenticated
from ..models import Account, Debt, Transaction, TransactionSubrecord
from ..money import ZERO, as_utc, quantize, utcnow

RECENT_LIMIT = 5


@dataclass(frozen=True, slots=True)
class TransactionView:
    id: int
    description: str
    amount: Decimal  # signed: negative for money out
    direction: str
    category: str
    payment_method: str
    occurred_at: datetime
    account_id: Optional[int]


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    total_balance: Decimal = ZERO
    cash_on_hand: Decimal = ZERO
    month_income: Decimal = ZERO
    month_expenses: Decimal = ZERO
    total_debt: Decimal = ZERO
    recent_transactions: list[TransactionView] = field(default_factory=list)

    @property
    def month_net(self) -> Decimal:
        return self.month_income - self.month_expenses


def month_bounds(today: date) -> tuple[datetime, datetime]:
    """Return [first day of month, first day of next month) as UTC datetimes."""

    start = datetime(today.year, today.month, 1, tzinfo=timezone.utc)
    if today.month == 12:
        end = datetime(today.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(today.year, today.month + 1, 1, tzinfo=timezone.utc)
    return start, end


class DashboardAggregator:
    """Computes the dashboard figures from store queries; never writes."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def get_summary(self, user_id: Optional[int], *, today: date | None = None) -> DashboardSummary:
        if user_id is None:
            raise Unauthenticated()
        start, end = month_bounds(today or utcnow().date())

        with self.store.run_atomic() as unit:
            accounts = unit.query(Account, Account.user_id == user_id)
            debts = unit.query(Debt, Debt.user_id == user_id, Debt.current_balance > 0)
            month = unit.query(
                Transaction,
                Transaction.user_id == user_id,
                Transaction.occurred_at >= start,
                Transaction.occurred_at < end,
            )
            recent = unit.query(
                Transaction,
                Transaction.user_id == user_id,
                order_by=(Transaction.occurred_at.desc(), Transaction.id.desc()),  # type: ignore[attr-defined]
                limit=RECENT_LIMIT,
            )
            tags = {}
            if recent:
                subrecords = unit.query(
                    TransactionSubrecord,
                    TransactionSubrecord.transaction_id.in_([t.id for t in recent]),  # type: ignore[attr-defined]
                )
                tags = {sub.transaction_id: sub.tag for sub in subrecords}

        cash = next((a for a in accounts if a.is_cash), None)
        return DashboardSummary(
            total_balance=quantize(sum((a.balance for a in accounts), start=ZERO)),
            cash_on_hand=quantize(cash.balance) if cash else ZERO,
            month_income=quantize(
                sum((t.amount for t in month if t.direction == Direction.IN.value), start=ZERO)
            ),
            month_expenses=quantize(
                sum((t.amount for t in month if t.direction == Direction.OUT.value), start=ZERO)
            ),
            total_debt=quantize(sum((d.current_balance for d in debts), start=ZERO)),
            recent_transactions=[
                TransactionView(
                    id=t.id,  # type: ignore[arg-type]
                    description=t.description,
                    amount=quantize(t.signed_amount),
                    direction=t.direction,
                    category=tags.get(t.id, ""),
                    payment_method=t.payment_method,
                    occurred_at=as_utc(t.occurred_at),
                    account_id=t.account_id,
                )
                for t in recent
            ],
        )
