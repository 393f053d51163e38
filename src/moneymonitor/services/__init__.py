"""Service module exports."""

from . import balance, dashboard, debts, history, ledger, recorder
from .balance import BalanceChange, BalanceMutator
from .dashboard import DashboardAggregator, DashboardSummary, TransactionView
from .ledger import LedgerOperations
from .recorder import RecordedTransaction, TransactionRecorder

__all__ = [
    "BalanceChange",
    "BalanceMutator",
    "DashboardAggregator",
    "DashboardSummary",
    "LedgerOperations",
    "RecordedTransaction",
    "TransactionRecorder",
    "TransactionView",
    "balance",
    "dashboard",
    "debts",
    "history",
    "ledger",
    "recorder",
]
