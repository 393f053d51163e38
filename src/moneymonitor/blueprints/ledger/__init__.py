"""Ledger blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("ledger", __name__, url_prefix="/ledger")

from . import routes  # noqa: E402,F401

__all__ = ["bp"]
