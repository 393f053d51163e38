"""Blueprint exports."""

from . import accounts, debts, ledger, overview

__all__ = [
    "accounts",
    "debts",
    "ledger",
    "overview",
]
