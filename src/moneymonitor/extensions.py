"""Flask wiring: the app context and the request identity."""

from __future__ import annotations

from typing import Optional

from flask import Flask, current_app, request

from .context import AppContext
from .domain.identity import Identity, IdentityProvider
from .errors import NotFound
from .models import User

EXTENSION_KEY = "moneymonitor"
USER_HEADER = "X-User-Id"


class HeaderIdentityProvider:
    """Reads the signed-in user id from a request header.

    Sign-in itself happens upstream; this only checks that the id names a
    provisioned user.
    """

    def __init__(self, context: AppContext, header: str = USER_HEADER):
        self.context = context
        self.header = header

    def current_user(self) -> Optional[Identity]:
        raw = request.headers.get(self.header, "").strip()
        if not raw:
            return None
        try:
            user_id = int(raw)
        except ValueError:
            return None
        try:
            user = self.context.store.get(User, user_id)
        except NotFound:
            return None
        return Identity(id=user_id, email=user.email)


def init_app(
    app: Flask, context: AppContext, identity_provider: Optional[IdentityProvider] = None
) -> None:
    """Attach the context and identity provider to the Flask application."""

    state = app.extensions.setdefault(EXTENSION_KEY, {})
    state["context"] = context
    state["identity"] = identity_provider or HeaderIdentityProvider(context)


def get_context() -> AppContext:
    """Return the AppContext bound to the running app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if not state:  # pragma: no cover - create_app always installs it
        raise RuntimeError("MoneyMonitor context not initialized")
    return state["context"]


def current_user_id() -> Optional[int]:
    """Id of the signed-in user, or None; ledger operations reject None."""

    provider: IdentityProvider = current_app.extensions[EXTENSION_KEY]["identity"]
    identity = provider.current_user()
    return identity.id if identity else None
