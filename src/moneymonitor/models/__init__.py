"""SQLModel table exports."""

from .account import Account
from .audit import AuditEntry
from .debt import Debt, DebtPayment
from .transaction import MoneyIn, MoneyOut, Transaction, TransactionSubrecord
from .user import User

__all__ = [
    "Account",
    "AuditEntry",
    "Debt",
    "DebtPayment",
    "MoneyIn",
    "MoneyOut",
    "Transaction",
    "TransactionSubrecord",
    "User",
]
