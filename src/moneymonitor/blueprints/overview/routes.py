"""Overview dashboard routes."""

from __future__ import annotations

from flask import jsonify

from ...constants.categories import category_label
from ...extensions import current_user_id, get_context
from ..common import money, timestamp
from . import bp


@bp.get("/")
def dashboard():
    """Dashboard totals and the five most recent transactions."""

    summary = get_context().dashboard.get_summary(current_user_id())
    return jsonify(
        {
            "total_balance": money(summary.total_balance),
            "cash_on_hand": money(summary.cash_on_hand),
            "month_income": money(summary.month_income),
            "month_expenses": money(summary.month_expenses),
            "month_net": money(summary.month_net),
            "total_debt": money(summary.total_debt),
            "recent_transactions": [
                {
                    "id": view.id,
                    "description": view.description,
                    "amount": money(view.amount),
                    "direction": view.direction,
                    "category": view.category,
                    "category_label": (
                        category_label(view.direction, view.category) if view.category else ""
                    ),
                    "payment_method": view.payment_method,
                    "occurred_at": timestamp(view.occurred_at),
                    "account_id": view.account_id,
                }
                for view in summary.recent_transactions
            ],
        }
    )
