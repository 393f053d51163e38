"""Money-in / money-out form validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ...constants import IncomeSource, SpendingCategory
from ...constants.categories import user_income_sources, user_spending_categories
from ..common import MappingForm


@dataclass(slots=True)
class MovementForm(MappingForm):
    """Fields shared by deposits and withdrawals."""

    account_id: Optional[int] = None
    amount: Optional[Decimal] = None
    description: str = ""
    debt_id: Optional[int] = None

    def _validate_common(self) -> None:
        self.errors.clear()
        self.account_id = self._int("account_id", required=True)
        self.amount = self._money("amount", required=True, minimum=Decimal("0.01"))
        self.description = self._text("description", required=True) or ""
        self.debt_id = self._int("debt_id")


@dataclass(slots=True)
class DepositForm(MovementForm):
    source_type: str = IncomeSource.OTHER.value

    def field_names(self) -> Iterable[str]:
        return ("account_id", "amount", "description", "debt_id", "source_type")

    def validate(self) -> bool:
        self._validate_common()
        source = self._text("source_type") or IncomeSource.OTHER.value
        allowed = {choice.value for choice in user_income_sources()}
        if source not in allowed:
            self._add_error("source_type", "Choose a valid income source.")
        self.source_type = source
        if source == IncomeSource.EXISTING_LOAN.value and self.debt_id is None and "debt_id" not in self.errors:
            self._add_error("debt_id", "Select the debt this loan adds to.")
        return not self.errors


@dataclass(slots=True)
class WithdrawalForm(MovementForm):
    category: str = SpendingCategory.OTHER.value

    def field_names(self) -> Iterable[str]:
        return ("account_id", "amount", "description", "debt_id", "category")

    def validate(self) -> bool:
        self._validate_common()
        category = self._text("category") or SpendingCategory.OTHER.value
        allowed = {choice.value for choice in user_spending_categories()}
        if category not in allowed:
            self._add_error("category", "Choose a valid spending category.")
        self.category = category
        return not self.errors
