"""Account form definitions and validation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ...constants import AccountKind
from ..common import MappingForm


@dataclass(slots=True)
class AccountForm(MappingForm):
    """Account create/edit input.

    On create the names are required and ``balance`` is the opening
    balance; on edit every field is optional and a present ``balance``
    reconciles the account to that value.
    """

    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    kind: Optional[str] = None
    balance: Optional[Decimal] = None
    partial: bool = False

    def field_names(self) -> Iterable[str]:
        return ("bank_name", "account_name", "kind", "balance")

    def validate(self) -> bool:
        self.errors.clear()
        required = not self.partial

        self.bank_name = self._text("bank_name", required=required)
        self.account_name = self._text("account_name", required=required)
        if self.partial:
            for key in ("bank_name", "account_name"):
                if self.provided(key) and not getattr(self, key):
                    self._add_error(key, "This field cannot be blank.")

        self.kind = self._text("kind")
        if self.kind:
            try:
                self.kind = AccountKind(self.kind.lower()).value
            except ValueError:
                self._add_error("kind", "Choose a valid account type.")
        elif not self.partial:
            self.kind = AccountKind.SAVINGS.value
        else:
            self.kind = None

        self.balance = self._money("balance", minimum=Decimal("0"))
        return not self.errors
