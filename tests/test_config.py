"""Configuration tests."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect

from moneymonitor import config as config_module
from moneymonitor.config import BaseConfig


def test_defaults_build_sqlite_url_in_data_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MONEYMONITOR_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("MONEYMONITOR_DATABASE_URL", raising=False)

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'moneymonitor.db'}"
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_database_url_override(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MONEYMONITOR_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MONEYMONITOR_DATABASE_URL", "postgresql://ledger@localhost/ledger")

    config = BaseConfig()

    assert config.DATABASE_URL == "postgresql://ledger@localhost/ledger"
    assert config.sqlalchemy_engine_options() == {"pool_pre_ping": True}


def test_non_dev_mode_requires_secret(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MONEYMONITOR_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MONEYMONITOR_DEV_MODE", "false")
    monkeypatch.delenv("MONEYMONITOR_SECRET_KEY", raising=False)

    with pytest.raises(ValueError):
        BaseConfig()

    monkeypatch.setenv("MONEYMONITOR_SECRET_KEY", "s3cret")
    config = BaseConfig()
    assert config.DEV_MODE is False
    assert config.SECRET_KEY == "s3cret"


def test_test_config_flags(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MONEYMONITOR_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MONEYMONITOR_LOG_LEVEL", "debug")

    config = config_module.TestConfig()

    assert config.TESTING is True
    assert config.LOG_LEVEL == "DEBUG"


def test_app_context_bootstraps_the_schema(app_context, tmp_path):
    tables = set(inspect(app_context.engine).get_table_names())

    assert {
        "user",
        "account",
        "transaction",
        "transaction_subrecord",
        "debt",
        "debt_payment",
        "audit_entry",
    } <= tables
    assert (tmp_path / "ledger.db").exists()
    assert app_context.ledger.store is app_context.store
