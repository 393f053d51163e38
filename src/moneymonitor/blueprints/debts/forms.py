"""Debt form definitions and validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..common import MappingForm


@dataclass(slots=True)
class DebtForm(MappingForm):
    """Represents debt inputs and associated validation errors."""

    name: Optional[str] = None
    description: Optional[str] = None
    total_amount: Optional[Decimal] = None
    current_balance: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None
    deadline: Optional[datetime] = None
    partial: bool = False

    def field_names(self) -> Iterable[str]:
        return (
            "name",
            "description",
            "total_amount",
            "current_balance",
            "interest_rate",
            "deadline",
        )

    def validate(self) -> bool:
        """Validate debt inputs returning True when all values are acceptable."""

        self.errors.clear()
        required = not self.partial

        self.name = self._text("name", required=required)
        if self.partial and self.provided("name") and not self.name:
            self._add_error("name", "Enter the creditor or debt name.")
        self.description = self._text("description")

        self.total_amount = self._money("total_amount", required=required, minimum=Decimal("0.01"))
        self.current_balance = self._money("current_balance", minimum=Decimal("0"))
        self.interest_rate = self._money("interest_rate", minimum=Decimal("0"))
        if isinstance(self.interest_rate, Decimal) and self.interest_rate > Decimal("100"):
            self._add_error("interest_rate", "Interest rate must be between 0 and 100 percent.")

        if isinstance(self.total_amount, Decimal) and isinstance(self.current_balance, Decimal):
            if self.current_balance > self.total_amount:
                self._add_error(
                    "current_balance", "Current balance cannot be greater than the total amount."
                )

        self.deadline = self._date("deadline")
        return not self.errors

    @property
    def error_messages(self) -> Iterable[str]:
        """Flattened iterable of error strings for summaries."""

        for messages in self.errors.values():
            yield from messages
