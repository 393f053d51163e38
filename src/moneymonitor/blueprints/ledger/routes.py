"""Ledger routes: money in, money out and transaction history."""

from __future__ import annotations

from flask import jsonify, request

from ...constants.categories import (
    INCOME_SOURCE_LABELS,
    SPENDING_CATEGORY_LABELS,
    user_income_sources,
    user_spending_categories,
)
from ...errors import Unauthenticated
from ...extensions import current_user_id, get_context
from ...services.history import (
    LedgerFilters,
    Pagination,
    compute_totals,
    list_transactions,
    normalize_filter_value,
    paginate,
)
from ..common import money, request_data, serialize_transaction, validation_error
from . import bp
from .forms import DepositForm, WithdrawalForm


def _page_arg(name: str, default: int) -> int:
    try:
        return max(1, int(request.args.get(name, default)))
    except (TypeError, ValueError):
        return default


@bp.post("/deposits")
def deposit():
    """Record money in."""

    form = DepositForm.from_mapping(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.deposit(
        current_user_id(),
        form.account_id,
        form.amount,
        description=form.description,
        source_type=form.source_type,
        debt_id=form.debt_id,
    )
    return (
        jsonify(
            {
                "transaction_id": result.transaction_id,
                "account_id": result.account_id,
                "account_balance": money(result.account_balance),
                "debt_id": result.debt_id,
                "debt_balance": money(result.debt_balance),
            }
        ),
        201,
    )


@bp.post("/withdrawals")
def withdraw():
    """Record money out."""

    form = WithdrawalForm.from_mapping(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.withdraw(
        current_user_id(),
        form.account_id,
        form.amount,
        description=form.description,
        category=form.category,
        debt_id=form.debt_id,
    )
    return (
        jsonify(
            {
                "transaction_id": result.transaction_id,
                "account_id": result.account_id,
                "account_balance": money(result.account_balance),
                "debt_id": result.debt_id,
                "debt_balance": money(result.debt_balance),
                "payment_id": result.payment_id,
            }
        ),
        201,
    )


@bp.get("/transactions")
def transactions():
    """Filtered, paginated transaction history."""

    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated()

    account_raw = normalize_filter_value(request.args.get("account_id"))
    filters = LedgerFilters(
        user_id=user_id,
        direction=normalize_filter_value(request.args.get("direction")),
        category=normalize_filter_value(request.args.get("category")),
        account_id=int(account_raw) if account_raw and account_raw.isdigit() else None,
        text=normalize_filter_value(request.args.get("q")),
    )
    pagination = Pagination(page=_page_arg("page", 1), per_page=_page_arg("per_page", 25))
    rows = list_transactions(get_context().store, filters)
    page_rows, total = paginate(rows, pagination)
    totals = compute_totals(row.transaction for row in rows)
    return jsonify(
        {
            "transactions": [serialize_transaction(row.transaction, row.category) for row in page_rows],
            "total": total,
            "page": pagination.page,
            "per_page": pagination.per_page,
            "totals": {key: money(value) for key, value in totals.items()},
        }
    )


@bp.get("/categories")
def categories():
    """Tags a user may pick, with their display labels."""

    return jsonify(
        {
            "income_sources": [
                {"value": source.value, "label": INCOME_SOURCE_LABELS[source]}
                for source in user_income_sources()
            ],
            "spending_categories": [
                {"value": category.value, "label": SPENDING_CATEGORY_LABELS[category]}
                for category in user_spending_categories()
            ],
        }
    )
