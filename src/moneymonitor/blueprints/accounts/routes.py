"""Account routes."""

from __future__ import annotations

from flask import jsonify

from ...errors import Unauthenticated
from ...extensions import current_user_id, get_context
from ...money import ZERO
from ...services.history import list_accounts
from ..common import flag, request_data, serialize_account, validation_error
from . import bp
from .forms import AccountForm


@bp.get("/")
def index():
    """List the signed-in user's accounts, cash first."""

    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated()
    accounts = list_accounts(get_context().store, user_id)
    return jsonify({"accounts": [serialize_account(account) for account in accounts]})


@bp.post("/")
def create():
    form = AccountForm.from_mapping(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.create_account(
        current_user_id(),
        bank_name=form.bank_name or "",
        account_name=form.account_name or "",
        kind=form.kind or "savings",
        opening_balance=form.balance if form.balance is not None else ZERO,
    )
    payload = {"account": serialize_account(result.account), "transaction_id": result.transaction_id}
    return jsonify(payload), 201


@bp.put("/<int:account_id>")
def update(account_id: int):
    form = AccountForm(partial=True)
    form.load(request_data())
    if not form.validate():
        return validation_error(form)

    result = get_context().ledger.reconcile_account(
        current_user_id(),
        account_id,
        form.balance,
        bank_name=form.bank_name,
        account_name=form.account_name,
        kind=form.kind,
    )
    return jsonify({"account": serialize_account(result.account), "transaction_id": result.transaction_id})


@bp.delete("/<int:account_id>")
def delete(account_id: int):
    result = get_context().ledger.delete_account(
        current_user_id(), account_id, purge_history=flag("purge_history")
    )
    return jsonify(
        {
            "deleted": result.entity_id,
            "transaction_id": result.transaction_id,
            "purged_transactions": result.purged_transactions,
        }
    )
