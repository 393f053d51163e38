"""Debt routes."""

from __future__ import annotations

from flask import jsonify

from ...errors import Unauthenticated
from ...extensions import current_user_id, get_context
from ...services.debts import DebtOverview, debt_portfolio
from ..common import flag, money, request_data, serialize_debt, timestamp, validation_error
from . import bp
from .forms import DebtForm


def _overview(item: DebtOverview) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "total_amount": money(item.total_amount),
        "current_balance": money(item.current_balance),
        "paid_amount": money(item.paid_amount),
        "progress": str(item.progress),
        "interest_rate": money(item.interest_rate),
        "deadline": timestamp(item.deadline),
        "days_remaining": item.days_remaining,
        "overdue": item.is_overdue,
    }


@bp.get("/")
def index():
    """List debts, soonest deadline first."""

    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated()
    portfolio = debt_portfolio(get_context().store, user_id)
    return jsonify(
        {
            "debts": [_overview(item) for item in portfolio.debts],
            "total_owed": money(portfolio.total_owed),
            "total_borrowed": money(portfolio.total_borrowed),
            "total_paid": money(portfolio.total_paid),
        }
    )


@bp.post("/")
def create():
    form = DebtForm.from_mapping(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.create_debt(
        current_user_id(),
        name=form.name or "",
        total_amount=form.total_amount,
        current_balance=form.current_balance,
        description=form.description or "",
        interest_rate=form.interest_rate if form.interest_rate is not None else 0,
        deadline=form.deadline,
    )
    return jsonify({"debt": serialize_debt(result.debt)}), 201


@bp.put("/<int:debt_id>")
def update(debt_id: int):
    form = DebtForm(partial=True)
    form.load(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.edit_debt(
        current_user_id(),
        debt_id,
        name=form.name,
        description=form.description,
        total_amount=form.total_amount,
        current_balance=form.current_balance,
        interest_rate=form.interest_rate,
        deadline=form.deadline,
    )
    return jsonify({"debt": serialize_debt(result.debt)})


@bp.delete("/<int:debt_id>")
def delete(debt_id: int):
    result = get_context().ledger.delete_debt(
        current_user_id(), debt_id, purge_history=flag("purge_history")
    )
    return jsonify(
        {
            "deleted": result.entity_id,
            "transaction_id": result.transaction_id,
            "purged_transactions": result.purged_transactions,
        }
    )
