"""JSON API tests through the Flask test client."""

from __future__ import annotations

import pytest

from moneymonitor.app import create_app
from moneymonitor.domain.identity import Identity, StaticIdentityProvider


@pytest.fixture()
def ledger_app(app_context):
    app = create_app(context=app_context)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(ledger_app):
    with ledger_app.test_client() as client:
        yield client


@pytest.fixture()
def member(app_context):
    return app_context.ledger.provision_user("member@example.com", "Member")


@pytest.fixture()
def headers(member):
    return {"X-User-Id": str(member.user.id)}


def test_requests_without_identity_are_rejected(client):
    response = client.get("/accounts/")
    assert response.status_code == 401
    assert response.get_json()["error"] == "unauthenticated"

    response = client.get("/overview/", headers={"X-User-Id": "not-a-number"})
    assert response.status_code == 401


def test_unknown_user_header_is_rejected(client):
    response = client.post("/ledger/deposits", json={"account_id": 1, "amount": "5"}, headers={"X-User-Id": "999"})
    assert response.status_code == 401


def test_account_lifecycle(client, headers, member):
    response = client.post(
        "/accounts/",
        json={"bank_name": "BPI", "account_name": "Savings", "kind": "savings", "balance": "250"},
        headers=headers,
    )
    assert response.status_code == 201
    created = response.get_json()
    account_id = created["account"]["id"]
    assert created["account"]["balance"] == "250.00"
    assert created["transaction_id"] is not None

    listing = client.get("/accounts/", headers=headers).get_json()["accounts"]
    assert [row["id"] for row in listing] == [member.cash_account.id, account_id]
    assert listing[0]["is_cash"] is True

    response = client.put(f"/accounts/{account_id}", json={"balance": "200", "account_name": "Rainy day"}, headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body["account"]["balance"] == "200.00"
    assert body["account"]["account_name"] == "Rainy day"
    assert body["transaction_id"] is not None

    response = client.delete(f"/accounts/{account_id}", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["transaction_id"] is not None


def test_account_form_errors(client, headers):
    response = client.post("/accounts/", json={"kind": "piggy", "balance": "-3"}, headers=headers)

    assert response.status_code == 422
    fields = response.get_json()["fields"]
    assert set(fields) == {"bank_name", "account_name", "kind", "balance"}


def test_cash_account_cannot_be_deleted(client, headers, member):
    response = client.delete(f"/accounts/{member.cash_account.id}", headers=headers)
    assert response.status_code == 403
    assert response.get_json()["error"] == "protected_entity"


def test_deposit_withdraw_and_history(client, headers, member):
    cash_id = member.cash_account.id

    response = client.post(
        "/ledger/deposits",
        json={"account_id": cash_id, "amount": "5000", "source_type": "salary", "description": "Pay"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.get_json()["account_balance"] == "5000.00"

    response = client.post(
        "/ledger/withdrawals",
        json={"account_id": cash_id, "amount": "2000", "category": "food", "description": "Groceries"},
        headers=headers,
    )
    assert response.status_code == 201
    assert response.get_json()["account_balance"] == "3000.00"

    response = client.post(
        "/ledger/withdrawals",
        json={"account_id": cash_id, "amount": "5000", "category": "food", "description": "Feast"},
        headers=headers,
    )
    assert response.status_code == 409
    assert response.get_json()["error"] == "insufficient_funds"

    history = client.get("/ledger/transactions?direction=IN", headers=headers).get_json()
    assert history["total"] == 1
    assert history["transactions"][0]["category"] == "salary"
    assert history["transactions"][0]["category_label"] == "Salary"
    assert history["transactions"][0]["signed_amount"] == "5000.00"
    assert history["totals"] == {"income": "5000.00", "expenses": "0.00", "net": "5000.00"}

    paged = client.get("/ledger/transactions?per_page=1&page=2", headers=headers).get_json()
    assert paged["total"] == 2
    assert paged["transactions"][0]["description"] == "Pay"
    assert paged["totals"] == {"income": "5000.00", "expenses": "2000.00", "net": "3000.00"}


def test_movement_form_rejects_system_tags(client, headers, member):
    response = client.post(
        "/ledger/deposits",
        json={"account_id": member.cash_account.id, "amount": "10", "source_type": "debt_forgiveness"},
        headers=headers,
    )
    assert response.status_code == 422
    assert "source_type" in response.get_json()["fields"]

    response = client.post("/ledger/withdrawals", json={"amount": "abc"}, headers=headers)
    assert response.status_code == 422
    assert set(response.get_json()["fields"]) == {"account_id", "amount", "description"}


@pytest.mark.parametrize("endpoint", ["/ledger/deposits", "/ledger/withdrawals"])
@pytest.mark.parametrize("description", ["", "   "])
def test_movements_require_a_description(client, headers, member, endpoint, description):
    response = client.post(
        endpoint,
        json={"account_id": member.cash_account.id, "amount": "10", "description": description},
        headers=headers,
    )

    assert response.status_code == 422
    assert set(response.get_json()["fields"]) == {"description"}
    assert client.get("/ledger/transactions", headers=headers).get_json()["total"] == 0


def test_unknown_account_is_not_found(client, headers):
    response = client.post(
        "/ledger/deposits", json={"account_id": 4040, "amount": "1", "description": "Tip"}, headers=headers
    )
    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


def test_debt_endpoints(client, headers, member):
    response = client.post(
        "/debts/",
        json={"name": "Laptop", "total_amount": "1000", "current_balance": "600", "deadline": "2030-01-31"},
        headers=headers,
    )
    assert response.status_code == 201
    debt = response.get_json()["debt"]
    assert debt["current_balance"] == "600.00"
    assert debt["deadline"].startswith("2030-01-31")

    response = client.put(f"/debts/{debt['id']}", json={"total_amount": "500"}, headers=headers)
    assert response.status_code == 422
    assert response.get_json()["error"] == "invalid_range"

    response = client.put(f"/debts/{debt['id']}", json={"current_balance": "550"}, headers=headers)
    assert response.get_json()["debt"]["current_balance"] == "550.00"

    listing = client.get("/debts/", headers=headers).get_json()
    assert listing["total_owed"] == "550.00"
    assert listing["debts"][0]["progress"] == "45.0"

    response = client.delete(f"/debts/{debt['id']}?purge_history=1", headers=headers)
    body = response.get_json()
    assert response.status_code == 200
    assert body["transaction_id"] is not None
    assert body["purged_transactions"] == 1


def test_overview(client, headers, member):
    client.post(
        "/ledger/deposits",
        json={
            "account_id": member.cash_account.id,
            "amount": "75.5",
            "source_type": "gift",
            "description": "Birthday",
        },
        headers=headers,
    )

    summary = client.get("/overview/", headers=headers).get_json()

    assert summary["cash_on_hand"] == "75.50"
    assert summary["month_income"] == "75.50"
    assert summary["month_net"] == "75.50"
    assert summary["total_debt"] == "0.00"
    assert summary["recent_transactions"][0]["category"] == "gift"
    assert summary["recent_transactions"][0]["category_label"] == "Gift"


def test_custom_identity_provider(app_context, member):
    provider = StaticIdentityProvider(Identity(id=member.user.id, email="member@example.com"))
    app = create_app(context=app_context, identity_provider=provider)

    response = app.test_client().get("/accounts/")

    assert response.status_code == 200
    assert len(response.get_json()["accounts"]) == 1


def test_category_choices_hide_system_tags(client):
    body = client.get("/ledger/categories").get_json()

    sources = {item["value"]: item["label"] for item in body["income_sources"]}
    categories = {item["value"]: item["label"] for item in body["spending_categories"]}
    assert sources["existing_loan"] == "Loan - Add to Existing Debt"
    assert "debt_forgiveness" not in sources
    assert "initial_deposit" not in sources
    assert categories["food"] == "Food & Dining"
    assert "account_closure" not in categories
