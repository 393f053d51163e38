"""Pytest configuration and shared fixtures for MoneyMonitor tests.

This module provides database fixtures, ledger fixtures, test data factories
and helper utilities for testing the ledger engine, read models and routes
without touching a real application database.
"""

from __future__ import annotations

import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import func
from sqlmodel import create_engine, select

from moneymonitor.config import TestConfig
from moneymonitor.context import AppContext, create_app_context
from moneymonitor.infra.database import create_session_factory, init_database
from moneymonitor.infra.store import SQLModelLedgerStore
from moneymonitor.models import Account, Debt, User
from moneymonitor.services.dashboard import DashboardAggregator
from moneymonitor.services.ledger import LedgerOperations

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Each test gets a fresh database file with all tables created.
    The database is automatically cleaned up after the test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    # Create temporary database file
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    init_database(engine)

    yield engine

    # Cleanup: close connections and delete database file
    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Transactional session scopes, as the application builds them."""

    return create_session_factory(db_engine)


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def store(session_factory) -> SQLModelLedgerStore:
    return SQLModelLedgerStore(session_factory)


@pytest.fixture
def ops(store) -> LedgerOperations:
    return LedgerOperations(store)


@pytest.fixture
def dashboard(store) -> DashboardAggregator:
    return DashboardAggregator(store)


@pytest.fixture
def provisioned(ops):
    """A fresh user with the cash account every user gets."""

    return ops.provision_user("tester@example.com", "Tester")


@pytest.fixture
def user(provisioned) -> User:
    return provisioned.user


@pytest.fixture
def cash_account(provisioned) -> Account:
    return provisioned.cash_account


@pytest.fixture
def other_user(ops) -> User:
    return ops.provision_user("someone-else@example.com", "Someone Else").user


@pytest.fixture
def app_context(tmp_path, monkeypatch: pytest.MonkeyPatch) -> AppContext:
    """Full application context on a throwaway data directory."""

    monkeypatch.setenv("MONEYMONITOR_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MONEYMONITOR_DATABASE_URL", f"sqlite:///{tmp_path / 'ledger.db'}")
    context = create_app_context(TestConfig())
    yield context
    context.dispose()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def account_factory(ops, user):
    """Factory for creating accounts through the ledger.

    Returns:
        Callable: Function that creates accounts and returns them
    """

    def _create_account(
        account_name: str = "Everyday",
        bank_name: str = "Test Bank",
        kind: str = "savings",
        opening_balance: Decimal | int | str = 0,
        owner: User | None = None,
    ) -> Account:
        owner = owner or user
        result = ops.create_account(
            owner.id,
            bank_name=bank_name,
            account_name=account_name,
            kind=kind,
            opening_balance=opening_balance,
        )
        return result.account

    return _create_account


@pytest.fixture
def debt_factory(ops, user):
    """Factory for creating debts through the ledger.

    Returns:
        Callable: Function that creates debts and returns them
    """

    def _create_debt(
        name: str = "Test Debt",
        total_amount: Decimal | int | str = 1000,
        current_balance: Decimal | int | str | None = None,
        interest_rate: Decimal | int | str = 0,
        deadline=None,
        owner: User | None = None,
    ) -> Debt:
        owner = owner or user
        result = ops.create_debt(
            owner.id,
            name=name,
            total_amount=total_amount,
            current_balance=current_balance,
            interest_rate=interest_rate,
            deadline=deadline,
        )
        return result.debt

    return _create_debt


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_money_equal(actual, expected, tolerance: Decimal = Decimal("0.01")):
    """Assert that two money values are equal within one cent.

    Args:
        actual: Actual value (Decimal, int, float or numeric string)
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    diff = abs(Decimal(str(actual)) - Decimal(str(expected)))
    assert diff < tolerance, f"Expected {expected}, got {actual} (diff: {diff})"


def count_rows(session_factory, model, *criteria) -> int:
    """Count committed rows of ``model`` matching ``criteria``."""

    with session_factory() as session:
        statement = select(func.count()).select_from(model)
        if criteria:
            statement = statement.where(*criteria)
        return int(session.exec(statement).one())


def reload(session_factory, model, entity_id):
    """Fetch a fresh copy of a committed row, or None."""

    with session_factory() as session:
        return session.get(model, entity_id)
