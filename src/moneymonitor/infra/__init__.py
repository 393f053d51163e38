"""Persistence infrastructure."""

from .database import bootstrap_database, create_db_engine, create_session_factory, init_database
from .store import SessionLedgerStore, SQLModelLedgerStore

__all__ = [
    "SQLModelLedgerStore",
    "SessionLedgerStore",
    "bootstrap_database",
    "create_db_engine",
    "create_session_factory",
    "init_database",
]
