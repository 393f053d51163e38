"""
Centralized tag vocabularies for transactions, accounts and audit entries.
Values are what gets stored; labels are what the UI layer shows.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    IN = "IN"
    OUT = "OUT"


class IncomeSource(str, Enum):
    SALARY = "salary"
    FREELANCE = "freelance"
    BUSINESS = "business"
    INVESTMENT = "investment"
    GIFT = "gift"
    LOAN = "loan"  # new loan, creates a debt
    EXISTING_LOAN = "existing_loan"  # more borrowing against a debt
    REFUND = "refund"
    OTHER = "other"
    DEBT_FORGIVENESS = "debt_forgiveness"
    BALANCE_ADJUSTMENT = "balance_adjustment"
    INITIAL_DEPOSIT = "initial_deposit"


class SpendingCategory(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    HOUSING = "housing"
    UTILITIES = "utilities"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    DEBT_PAYMENT = "debt_payment"
    SAVINGS = "savings"
    OTHER = "other"
    BALANCE_ADJUSTMENT = "balance_adjustment"
    ACCOUNT_CLOSURE = "account_closure"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"
    BANK_TRANSFER = "bank_transfer"
    BALANCE_ADJUSTMENT = "balance_adjustment"
    ACCOUNT_CLOSURE = "account_closure"
    DEBT_FORGIVENESS = "debt_forgiveness"


class ChangeType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    INITIAL_DEPOSIT = "INITIAL_DEPOSIT"
    BALANCE_ADJUSTMENT = "BALANCE_ADJUSTMENT"
    DEBT_OPENED = "DEBT_OPENED"
    DEBT_BORROWED = "DEBT_BORROWED"
    DEBT_PAYMENT = "DEBT_PAYMENT"


class AccountKind(str, Enum):
    SAVINGS = "savings"
    CHECKING = "checking"
    CREDIT_CARD = "credit_card"
    EWALLET = "ewallet"
    INVESTMENT = "investment"
    OTHER = "other"


class EntityKind(str, Enum):
    ACCOUNT = "account"
    DEBT = "debt"


# Tags only the engine may write; user-entered transactions cannot use them.
SYSTEM_INCOME_SOURCES = frozenset(
    {
        IncomeSource.DEBT_FORGIVENESS,
        IncomeSource.BALANCE_ADJUSTMENT,
        IncomeSource.INITIAL_DEPOSIT,
    }
)
SYSTEM_SPENDING_CATEGORIES = frozenset(
    {SpendingCategory.BALANCE_ADJUSTMENT, SpendingCategory.ACCOUNT_CLOSURE}
)

INCOME_SOURCE_LABELS = {
    IncomeSource.SALARY: "Salary",
    IncomeSource.FREELANCE: "Freelance Work",
    IncomeSource.BUSINESS: "Business Income",
    IncomeSource.INVESTMENT: "Investment Return",
    IncomeSource.GIFT: "Gift",
    IncomeSource.LOAN: "Loan - Create New Debt",
    IncomeSource.EXISTING_LOAN: "Loan - Add to Existing Debt",
    IncomeSource.REFUND: "Refund",
    IncomeSource.OTHER: "Other",
    IncomeSource.DEBT_FORGIVENESS: "Debt Forgiveness",
    IncomeSource.BALANCE_ADJUSTMENT: "Balance Adjustment",
    IncomeSource.INITIAL_DEPOSIT: "Initial Deposit",
}

SPENDING_CATEGORY_LABELS = {
    SpendingCategory.FOOD: "Food & Dining",
    SpendingCategory.TRANSPORT: "Transportation",
    SpendingCategory.HOUSING: "Housing & Rent",
    SpendingCategory.UTILITIES: "Utilities",
    SpendingCategory.SHOPPING: "Shopping",
    SpendingCategory.ENTERTAINMENT: "Entertainment",
    SpendingCategory.HEALTH: "Health & Medical",
    SpendingCategory.EDUCATION: "Education",
    SpendingCategory.DEBT_PAYMENT: "Debt Payment",
    SpendingCategory.SAVINGS: "Savings & Investment",
    SpendingCategory.OTHER: "Other",
    SpendingCategory.BALANCE_ADJUSTMENT: "Balance Adjustment",
    SpendingCategory.ACCOUNT_CLOSURE: "Account Closure",
}


def user_income_sources() -> list[IncomeSource]:
    """Income sources a user may pick when recording money in."""

    return [source for source in IncomeSource if source not in SYSTEM_INCOME_SOURCES]


def user_spending_categories() -> list[SpendingCategory]:
    """Spending categories a user may pick when recording money out."""

    return [cat for cat in SpendingCategory if cat not in SYSTEM_SPENDING_CATEGORIES]


def category_for(direction: Direction, value: str) -> IncomeSource | SpendingCategory:
    """Resolve ``value`` in the vocabulary that matches ``direction``.

    Raises ValueError for tags that do not belong to that vocabulary.
    """

    if Direction(direction) is Direction.IN:
        return IncomeSource(value)
    return SpendingCategory(value)


def category_label(direction: Direction | str, value: str) -> str:
    """Display label for a stored tag; unknown tags are shown as stored."""

    try:
        tag = category_for(direction, value)
    except ValueError:
        return value
    if isinstance(tag, IncomeSource):
        return INCOME_SOURCE_LABELS[tag]
    return SPENDING_CATEGORY_LABELS[tag]
