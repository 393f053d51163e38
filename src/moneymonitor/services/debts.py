"""Debt list read model: progress and deadlines per debt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..domain.store import LedgerStore
from ..models import Debt
from ..money import ZERO, as_utc, quantize, utcnow

LATEST = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class DebtOverview:
    """One debt as the debt list shows it."""

    id: int
    name: str
    total_amount: Decimal
    current_balance: Decimal
    paid_amount: Decimal
    progress: Decimal  # percent paid, 0-100 with one decimal
    interest_rate: Decimal
    deadline: Optional[datetime]
    days_remaining: Optional[int]  # negative once overdue

    @property
    def is_settled(self) -> bool:
        return self.current_balance <= ZERO

    @property
    def is_overdue(self) -> bool:
        return self.days_remaining is not None and self.days_remaining < 0 and not self.is_settled


@dataclass(slots=True)
class DebtPortfolio:
    debts: list[DebtOverview] = field(default_factory=list)
    total_owed: Decimal = ZERO
    total_borrowed: Decimal = ZERO
    total_paid: Decimal = ZERO

    @property
    def active(self) -> list[DebtOverview]:
        return [debt for debt in self.debts if not debt.is_settled]


def _progress(total: Decimal, paid: Decimal) -> Decimal:
    if total <= ZERO:
        return Decimal("0.0")
    percent = paid / total * 100
    percent = min(max(percent, Decimal(0)), Decimal(100))
    return percent.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def build_overview(debt: Debt, *, today: date) -> DebtOverview:
    total = quantize(debt.total_amount)
    current = quantize(debt.current_balance)
    paid = max(total - current, ZERO)
    deadline = as_utc(debt.deadline)
    days_remaining = None
    if deadline is not None:
        days_remaining = (deadline.date() - today).days
    return DebtOverview(
        id=debt.id or 0,
        name=debt.name,
        total_amount=total,
        current_balance=current,
        paid_amount=paid,
        progress=_progress(total, paid),
        interest_rate=quantize(debt.interest_rate),
        deadline=deadline,
        days_remaining=days_remaining,
    )


def debt_portfolio(store: LedgerStore, user_id: int, today: date | None = None) -> DebtPortfolio:
    """All of a user's debts, soonest deadline first (no deadline last)."""

    current_day = today or utcnow().date()
    debts = store.query(Debt, Debt.user_id == user_id)
    overviews = [build_overview(debt, today=current_day) for debt in debts]
    overviews.sort(
        key=lambda o: (o.deadline is None, o.deadline or LATEST, o.id)
    )
    return DebtPortfolio(
        debts=overviews,
        total_owed=sum((o.current_balance for o in overviews), start=ZERO),
        total_borrowed=sum((o.total_amount for o in overviews), start=ZERO),
        total_paid=sum((o.paid_amount for o in overviews), start=ZERO),
    )
