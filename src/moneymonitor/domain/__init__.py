"""Protocols the ledger engine depends on."""

from .identity import Identity, IdentityProvider, StaticIdentityProvider
from .store import LedgerStore

__all__ = ["Identity", "IdentityProvider", "LedgerStore", "StaticIdentityProvider"]
