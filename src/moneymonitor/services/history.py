"""Ledger-specific helpers for filtering, listing and paging history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from ..constants import Direction
from ..domain.store import LedgerStore
from ..errors import InvalidInput
from ..models import Account, Transaction, TransactionSubrecord
from ..money import ZERO, as_utc


@dataclass
class LedgerFilters:
    """Filters applied to ledger listings."""

    user_id: int
    direction: Optional[str] = None  # IN | OUT | None for both
    category: Optional[str] = None  # income source or spending category value
    account_id: Optional[int] = None
    text: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass
class Pagination:
    """Simple pagination parameters."""

    page: int = 1
    per_page: int = 25


@dataclass(frozen=True, slots=True)
class HistoryRow:
    transaction: Transaction
    category: str


def normalize_filter_value(raw_value: Optional[str]) -> Optional[str]:
    """Return a nullable filter value, treating falsy/'all' as None."""

    if not raw_value:
        return None
    lowered = raw_value.strip().lower()
    if lowered in {"", "all", "none", "any"}:
        return None
    return raw_value.strip()


def list_transactions(store: LedgerStore, filters: LedgerFilters) -> list[HistoryRow]:
    """Fetch transactions with their tag, newest first."""

    criteria: list[Any] = [Transaction.user_id == filters.user_id]
    if filters.direction:
        try:
            direction = Direction(filters.direction.upper())
        except ValueError as exc:
            raise InvalidInput(f"Unknown direction {filters.direction!r}") from exc
        criteria.append(Transaction.direction == direction.value)
    if filters.account_id is not None:
        criteria.append(Transaction.account_id == filters.account_id)
    if filters.start is not None:
        criteria.append(Transaction.occurred_at >= as_utc(filters.start))
    if filters.end is not None:
        criteria.append(Transaction.occurred_at <= as_utc(filters.end))
    if filters.text:
        criteria.append(Transaction.description.ilike(f"%{filters.text.strip()}%"))  # type: ignore[attr-defined]

    with store.run_atomic() as unit:
        transactions = unit.query(
            Transaction,
            *criteria,
            order_by=(Transaction.occurred_at.desc(), Transaction.id.desc()),  # type: ignore[attr-defined]
        )
        ids = [txn.id for txn in transactions]
        tags = _tags_by_transaction(unit, ids)

    rows = [HistoryRow(transaction=txn, category=tags.get(txn.id, "")) for txn in transactions]
    if filters.category:
        rows = [row for row in rows if row.category == filters.category]
    return rows


def _tags_by_transaction(unit: LedgerStore, ids: list[Optional[int]]) -> dict[int, str]:
    if not ids:
        return {}
    subrecords = unit.query(
        TransactionSubrecord,
        TransactionSubrecord.transaction_id.in_(ids),  # type: ignore[attr-defined]
    )
    return {sub.transaction_id: sub.tag for sub in subrecords}


def paginate(rows: list[Any], pagination: Pagination) -> tuple[list[Any], int]:
    """Return the current page of rows and total count."""

    total = len(rows)
    page = max(1, pagination.page)
    per_page = max(1, pagination.per_page)
    start = (page - 1) * per_page
    end = start + per_page
    return rows[start:end], total


def list_accounts(store: LedgerStore, user_id: int) -> list[Account]:
    """Accounts with the cash account first, then by balance descending."""

    accounts = store.query(Account, Account.user_id == user_id)
    return sorted(accounts, key=lambda a: (not a.is_cash, -a.balance, a.id or 0))


def compute_totals(transactions: Iterable[Transaction]) -> dict[str, Any]:
    """Income, expenses and net for the provided transactions."""

    txs = list(transactions)
    income = sum((t.amount for t in txs if t.direction == Direction.IN.value), start=ZERO)
    expenses = sum((t.amount for t in txs if t.direction == Direction.OUT.value), start=ZERO)
    return {"income": income, "expenses": expenses, "net": income - expenses}