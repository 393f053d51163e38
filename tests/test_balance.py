"""Tests for the balance mutator."""

from __future__ import annotations

from decimal import Decimal

import pytest

from moneymonitor.constants import ChangeType, EntityKind
from moneymonitor.errors import StorageFailure
from moneymonitor.models import Account, AuditEntry, Debt
from moneymonitor.services.balance import BalanceMutator
from tests.conftest import assert_money_equal, count_rows, reload


@pytest.fixture
def mutator() -> BalanceMutator:
    return BalanceMutator()


def test_account_delta_writes_balance_and_one_audit_entry(store, session_factory, mutator, cash_account):
    with store.run_atomic() as unit:
        change = mutator.apply_delta(
            unit, EntityKind.ACCOUNT, cash_account.id, Decimal("125.50"), change_type=ChangeType.IN
        )

    assert change.applied
    assert change.previous_balance == Decimal("0.00")
    assert change.new_balance == Decimal("125.50")
    assert_money_equal(reload(session_factory, Account, cash_account.id).balance, "125.50")

    entries = store.query(AuditEntry, AuditEntry.entity_id == cash_account.id)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.entity_kind == "account"
    assert entry.change_type == "IN"
    assert entry.change_amount == Decimal("125.50")
    assert entry.id == change.audit_entry_id


def test_accounts_may_go_negative(store, mutator, cash_account):
    with store.run_atomic() as unit:
        change = mutator.apply_delta(
            unit, "account", cash_account.id, Decimal("-20"), change_type=ChangeType.OUT
        )
    assert change.new_balance == Decimal("-20.00")


def test_debt_balance_clamps_at_zero(store, session_factory, mutator, debt_factory):
    debt = debt_factory(total_amount=1000)

    with store.run_atomic() as unit:
        change = mutator.apply_delta(
            unit, EntityKind.DEBT, debt.id, Decimal("-1200"), change_type=ChangeType.DEBT_PAYMENT
        )

    assert change.new_balance == Decimal("0.00")
    assert change.change_amount == Decimal("1000.00")
    assert reload(session_factory, Debt, debt.id).current_balance == Decimal("0.00")
    payment_entry = store.query(
        AuditEntry, AuditEntry.entity_id == debt.id, AuditEntry.change_type == "DEBT_PAYMENT"
    )[0]
    assert payment_entry.change_amount == Decimal("1000.00")


def test_negligible_delta_is_a_no_op(store, session_factory, mutator, cash_account):
    with store.run_atomic() as unit:
        change = mutator.apply_delta(
            unit, EntityKind.ACCOUNT, cash_account.id, Decimal("0.004"), change_type=ChangeType.IN
        )

    assert not change.applied
    assert change.previous_balance == change.new_balance
    assert count_rows(session_factory, AuditEntry) == 0


def test_paying_a_settled_debt_writes_nothing(store, session_factory, mutator, debt_factory):
    debt = debt_factory(total_amount=300, current_balance=0)

    with store.run_atomic() as unit:
        change = mutator.apply_delta(
            unit, EntityKind.DEBT, debt.id, Decimal("-50"), change_type=ChangeType.DEBT_PAYMENT
        )

    assert not change.applied
    assert count_rows(session_factory, AuditEntry, AuditEntry.entity_id == debt.id) == 0


class _RacingStore:
    """Delegates to a real unit but loses every compare-and-set."""

    def __init__(self, unit):
        self.unit = unit

    def __getattr__(self, name):
        return getattr(self.unit, name)

    def compare_and_set(self, *args, **kwargs):
        return False


def test_lost_race_raises_storage_failure(store, session_factory, mutator, cash_account):
    with pytest.raises(StorageFailure) as excinfo:
        with store.run_atomic() as unit:
            mutator.apply_delta(
                _RacingStore(unit),
                EntityKind.ACCOUNT,
                cash_account.id,
                Decimal("10"),
                change_type=ChangeType.IN,
            )

    assert excinfo.value.transient
    assert count_rows(session_factory, AuditEntry) == 0
    assert reload(session_factory, Account, cash_account.id).balance == Decimal("0.00")


def test_stale_unit_loses_to_a_committed_deposit(store, ops, session_factory, mutator, user, cash_account):
    ops.deposit(user.id, cash_account.id, 100, description="Paycheck")

    with pytest.raises(StorageFailure) as excinfo:
        with store.run_atomic() as stale:
            # Read the balance before another writer commits.
            assert stale.get(Account, cash_account.id).balance == Decimal("100.00")
            ops.deposit(user.id, cash_account.id, 50, description="Refund")
            mutator.apply_delta(
                stale, EntityKind.ACCOUNT, cash_account.id, Decimal("-30"), change_type=ChangeType.OUT
            )

    assert excinfo.value.transient
    assert "changed concurrently" in str(excinfo.value)
    assert reload(session_factory, Account, cash_account.id).balance == Decimal("150.00")
    assert count_rows(session_factory, AuditEntry, AuditEntry.entity_id == cash_account.id) == 2
