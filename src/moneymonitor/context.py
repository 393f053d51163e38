"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.store import SQLModelLedgerStore
from .services.dashboard import DashboardAggregator
from .services.ledger import LedgerOperations


@dataclass
class AppContext:
    """Centralized application context with services."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory
    store: SQLModelLedgerStore
    ledger: LedgerOperations
    dashboard: DashboardAggregator

    def dispose(self) -> None:
        """Release pooled connections (tests and CLI runs)."""

        self.engine.dispose()


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config)
    store = SQLModelLedgerStore(session_factory)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        store=store,
        ledger=LedgerOperations(store),
        dashboard=DashboardAggregator(store),
    )
