"""Helpers shared by the JSON blueprints: form base and serializers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from flask import jsonify, request

from ..constants.categories import category_label
from ..models import Account, Debt, Transaction
from ..money import as_utc, quantize


@dataclass(slots=True)
class MappingForm:
    """Base for request-body forms: bind raw strings, then validate."""

    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None):
        """Create a form populated from request data."""

        form = cls()
        form.load(data or {})
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        """Bind incoming mapping data to the form state."""

        self.raw_data = {}
        for key in self.field_names():
            value = data.get(key)
            if value is None:
                continue
            self.raw_data[key] = value if isinstance(value, str) else str(value)

    def field_names(self) -> Iterable[str]:
        return ()

    def validate(self) -> bool:
        raise NotImplementedError

    def provided(self, key: str) -> bool:
        return key in self.raw_data

    def _add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, []).append(message)

    def _text(self, key: str, *, required: bool = False) -> Optional[str]:
        raw = self.raw_data.get(key)
        if raw is None or not raw.strip():
            if required:
                self._add_error(key, "This field is required.")
            return None if raw is None else ""
        return raw.strip()

    def _money(self, key: str, *, required: bool = False, minimum: Decimal | None = None) -> Optional[Decimal]:
        raw = (self.raw_data.get(key) or "").strip()
        if not raw:
            if required:
                self._add_error(key, "This field is required.")
            return None
        try:
            value = Decimal(raw.replace(",", ""))
        except (InvalidOperation, ValueError):
            self._add_error(key, "Enter a valid number.")
            return None
        if not value.is_finite():
            self._add_error(key, "Enter a valid number.")
            return None
        if minimum is not None and value < minimum:
            self._add_error(
                key,
                "Amount must be greater than zero." if minimum > 0 else "Amount must be at least zero.",
            )
        return value

    def _int(self, key: str, *, required: bool = False) -> Optional[int]:
        raw = (self.raw_data.get(key) or "").strip()
        if not raw:
            if required:
                self._add_error(key, "This field is required.")
            return None
        try:
            return int(raw)
        except ValueError:
            self._add_error(key, "Enter a whole number id.")
            return None

    def _date(self, key: str) -> Optional[datetime]:
        raw = (self.raw_data.get(key) or "").strip()
        if not raw:
            return None
        try:
            if len(raw) == 10:
                return datetime.strptime(raw, "%Y-%m-%d").replace(tzinfo=timezone.utc)
            return as_utc(datetime.fromisoformat(raw))
        except ValueError:
            self._add_error(key, "Enter a valid date (YYYY-MM-DD).")
            return None


def request_data() -> Mapping[str, Any]:
    """JSON body when present, form fields otherwise."""

    payload = request.get_json(silent=True)
    if isinstance(payload, Mapping):
        return payload
    return request.form


def validation_error(form: MappingForm):
    return jsonify({"error": "validation_failed", "fields": form.errors}), 422


def money(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    return str(quantize(Decimal(value)))


def timestamp(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def serialize_account(account: Account) -> dict[str, Any]:
    return {
        "id": account.id,
        "bank_name": account.bank_name,
        "account_name": account.account_name,
        "kind": account.kind,
        "balance": money(account.balance),
        "is_cash": account.is_cash,
        "created_at": timestamp(account.created_at),
        "updated_at": timestamp(account.updated_at),
    }


def serialize_debt(debt: Debt) -> dict[str, Any]:
    return {
        "id": debt.id,
        "name": debt.name,
        "description": debt.description,
        "total_amount": money(debt.total_amount),
        "current_balance": money(debt.current_balance),
        "interest_rate": money(debt.interest_rate),
        "deadline": timestamp(debt.deadline),
        "originating_transaction_id": debt.originating_transaction_id,
    }


def serialize_transaction(transaction: Transaction, category: str = "") -> dict[str, Any]:
    return {
        "id": transaction.id,
        "description": transaction.description,
        "amount": money(transaction.amount),
        "signed_amount": money(transaction.signed_amount),
        "direction": transaction.direction,
        "category": category,
        "category_label": category_label(transaction.direction, category) if category else "",
        "payment_method": transaction.payment_method,
        "occurred_at": timestamp(transaction.occurred_at),
        "account_id": transaction.account_id,
        "debt_id": transaction.debt_id,
    }


def flag(name: str) -> bool:
    """Truthy query-string flag such as ``?purge_history=1``."""

    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes", "on"}
