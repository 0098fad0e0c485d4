from decimal import Decimal

from conftest import create_account, register


def _seed(client, headers):
    wallet = create_account(client, headers, "200.00", name="Wallet")
    savings = create_account(client, headers, "50.00", kind="bank", name="Savings")
    food = client.get("/categories/type/expense", headers=headers).json()[0]
    client.post(
        "/transactions/expense",
        json={"account_id": wallet["id"], "category_id": food["id"], "amount": "12.40", "note": "Lunch"},
        headers=headers,
    )
    client.post(
        "/transfer",
        json={"from_account_id": wallet["id"], "to_account_id": savings["id"], "amount": "40.00"},
        headers=headers,
    )
    client.post(
        "/investments",
        json={"amount": "25.00", "type_id": "gold", "account_id": savings["id"], "name": "Coins"},
        headers=headers,
    )
    return wallet, savings


def _balances(client, headers):
    return {a["name"]: Decimal(a["balance"]) for a in client.get("/accounts", headers=headers).json()}


def test_export_then_import_restores_the_same_books(client, owner, notifier):
    headers = owner["headers"]
    _seed(client, headers)
    before = _balances(client, headers)
    export = client.get("/users/export", headers=headers).json()

    resp = client.post("/users/import", json=export, headers=headers)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["mode"] == "replace"
    assert body["imported"] == {"accounts": 2, "categories": 3, "transactions": 4, "transfers": 1, "investments": 1}
    assert body["skipped"] == {
        "transactions_invalid_refs": 0,
        "transfers_invalid_refs": 0,
        "investments_invalid_refs": 0,
    }
    assert body["deleted_before_import"]["transactions"] == 4
    assert _balances(client, headers) == before == {"Wallet": Decimal("147.60"), "Savings": Decimal("65.00")}
    assert "categories:updated" in notifier.names()


def test_imported_rows_are_relinked_to_new_ids(client, owner):
    headers = owner["headers"]
    _seed(client, headers)
    client.post("/users/import", json=client.get("/users/export", headers=headers).json(), headers=headers)

    account_ids = {a["id"] for a in client.get("/accounts", headers=headers).json()}
    category_ids = {c["id"] for c in client.get("/categories", params={"type": "expense"}, headers=headers).json()}
    rows = client.get("/transactions", headers=headers).json()
    legs = [r for r in rows if r["kind"] == "transfer"]

    assert {r["account_id"] for r in rows} <= account_ids
    assert [r["category_id"] for r in rows if r["kind"] == "expense"][0] in category_ids
    # borrar una pata revierte la transferencia completa
    deleted = client.delete(f"/transactions/{legs[0]['id']}", headers=headers)
    assert deleted.status_code == 200, deleted.text
    assert _balances(client, headers) == {"Wallet": Decimal("187.60"), "Savings": Decimal("25.00")}


def test_rows_with_unknown_references_are_skipped(client, owner):
    payload = {
        "accounts": [{"id": 1, "name": "Cash", "type": "cash", "balance": "30.00"}],
        "categories": [{"id": 7, "name": "Fuel", "type": "expense"}],
        "transactions": [
            {"id": 1, "account_id": 1, "category_id": 7, "kind": "expense", "amount": "5.00"},
            {"id": 2, "account_id": 99, "kind": "income", "amount": "5.00"},
            {"id": 3, "account_id": 1, "category_id": 42, "kind": "expense", "amount": "5.00"},
            {"id": 4, "account_id": 1, "kind": "transfer", "amount": "-5.00", "reference_id": 500},
        ],
        "transfers": [{"id": 9, "from_account_id": 1, "to_account_id": 99, "amount": "5.00"}],
        "investments": [{"id": 3, "account_id": 99, "investment_type": "gold", "amount": "5.00"}],
    }

    body = client.post("/users/import", json=payload, headers=owner["headers"]).json()

    assert body["imported"]["transactions"] == 1
    assert body["skipped"] == {
        "transactions_invalid_refs": 3,
        "transfers_invalid_refs": 1,
        "investments_invalid_refs": 1,
    }
    assert _balances(client, owner["headers"]) == {"Cash": Decimal("30.00")}


def test_empty_or_invalid_import_leaves_data_untouched(client, owner):
    create_account(client, owner["headers"], "10.00")

    empty = client.post("/users/import", json={"meta": {"format": "money-manager-export"}}, headers=owner["headers"])
    negative = client.post(
        "/users/import",
        json={"accounts": [{"id": 1, "name": "Bad", "type": "bank", "balance": "-1.00"}]},
        headers=owner["headers"],
    )

    assert empty.status_code == 400
    assert empty.json() == {"error": "Import file has no data sections"}
    assert negative.status_code == 400
    assert _balances(client, owner["headers"]) == {"Main": Decimal("10.00")}


def test_import_only_touches_the_callers_data(client, owner):
    create_account(client, owner["headers"], "10.00")
    _, other_headers = register(client, email="other@finmail.io")

    client.post(
        "/users/import",
        json={"accounts": [{"id": 1, "name": "Fresh", "type": "bank", "balance": "1.00"}]},
        headers=other_headers,
    )

    assert _balances(client, owner["headers"]) == {"Main": Decimal("10.00")}
    assert _balances(client, other_headers) == {"Fresh": Decimal("1.00")}
