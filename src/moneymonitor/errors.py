"""Typed failures raised at the ledger operation boundary."""

from __future__ import annotations

from typing import Any, ClassVar


class LedgerError(Exception):
    """Base class for every failure a ledger use case can report."""

    code: ClassVar[str] = "ledger_error"
    status: ClassVar[int] = 400
    transient: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": str(self)}


class Unauthenticated(LedgerError):
    code = "unauthenticated"
    status = 401

    def __init__(self, message: str = "A signed-in user is required") -> None:
        super().__init__(message)


class NotFound(LedgerError):
    code = "not_found"
    status = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")


class InvalidAmount(LedgerError):
    code = "invalid_amount"
    status = 422


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"
    status = 409

    def __init__(self, available: Any, requested: Any) -> None:
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient balance. Available: {available}, requested: {requested}")


class InvalidRange(LedgerError):
    code = "invalid_range"
    status = 422


class ProtectedEntity(LedgerError):
    code = "protected_entity"
    status = 403


class InvalidInput(LedgerError):
    code = "invalid_input"
    status = 422


class StorageFailure(LedgerError):
    """The atomic commit did not happen; nothing partial was written."""

    code = "storage_failure"
    status = 503
    transient = True


__all__ = [
    "InsufficientFunds",
    "InvalidAmount",
    "InvalidInput",
    "InvalidRange",
    "LedgerError",
    "NotFound",
    "ProtectedEntity",
    "StorageFailure",
    "Unauthenticated",
]
