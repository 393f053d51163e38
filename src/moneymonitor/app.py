"""MoneyMonitor application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable, Optional

from flask import Flask, jsonify

from . import cli as _cli
from . import extensions
from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.identity import IdentityProvider
from .errors import LedgerError
from .logging_config import get_logger, setup_logging

logger = get_logger("app")


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths registered on every app."""

    yield "moneymonitor.blueprints.accounts"
    yield "moneymonitor.blueprints.ledger"
    yield "moneymonitor.blueprints.debts"
    yield "moneymonitor.blueprints.overview"


def create_app(
    config: Optional[BaseConfig] = None,
    context: Optional[AppContext] = None,
    identity_provider: Optional[IdentityProvider] = None,
) -> Flask:
    """Create and configure the Flask application instance."""

    if context is None:
        context = create_app_context(config)
    config_obj = context.config

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_obj)
    app.config["MONEYMONITOR_CONFIG"] = config_obj

    setup_logging(config_obj)
    extensions.init_app(app, context, identity_provider)
    _register_blueprints(app)
    _register_error_handlers(app)
    _cli.init_app(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LedgerError)
    def _ledger_error(exc: LedgerError):
        if exc.status >= 500:
            logger.error("Request failed: %s", exc.code, extra={"reason": str(exc)})
        return jsonify(exc.to_dict()), exc.status
