"""Identity provider contract consumed by the ledger surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True, slots=True)
class Identity:
    id: int
    email: str = ""


class IdentityProvider(Protocol):
    """Source of the signed-in user; sign-up and login live elsewhere."""

    def current_user(self) -> Optional[Identity]:
        ...


class StaticIdentityProvider:
    """Provider returning a fixed identity (CLI runs and tests)."""

    def __init__(self, identity: Optional[Identity] = None) -> None:
        self.identity = identity

    def current_user(self) -> Optional[Identity]:
        return self.identity
