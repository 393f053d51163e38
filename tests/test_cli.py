"""Flask CLI command tests."""

from __future__ import annotations

import pytest

from moneymonitor.app import create_app
from moneymonitor.models import Account, User


@pytest.fixture()
def runner(app_context):
    return create_app(context=app_context).test_cli_runner()


def test_init_db(runner, app_context):
    result = runner.invoke(args=["moneymonitor-init-db"])
    assert result.exit_code == 0
    assert app_context.config.DATABASE_URL in result.output


def test_provision_and_summary(runner, app_context):
    result = runner.invoke(args=["moneymonitor-provision", "--email", "cli@example.com", "--name", "Cli"])
    assert result.exit_code == 0
    assert "cash account" in result.output

    user = app_context.store.query(User, User.email == "cli@example.com")[0]
    cash = app_context.store.query(Account, Account.user_id == user.id, Account.is_cash == True)[0]  # noqa: E712
    app_context.ledger.deposit(user.id, cash.id, 42, description="Paycheck")

    result = runner.invoke(args=["moneymonitor-summary", "--user-id", str(user.id)])
    assert result.exit_code == 0
    assert "Cash on hand:    42.00" in result.output


def test_duplicate_provision_fails_cleanly(runner):
    runner.invoke(args=["moneymonitor-provision", "--email", "dup@example.com"])
    result = runner.invoke(args=["moneymonitor-provision", "--email", "dup@example.com"])
    assert result.exit_code != 0
    assert "already provisioned" in result.output
