from app.models import Transaction


def test_add_and_spend_over_http(client, make_player, auth_headers):
    user = make_player("ada")
    headers = auth_headers(user)

    res = client.post(
        "/api/v1/transactions/add",
        headers=headers,
        json={"currency": "coins", "amount": 1000, "description": "Quest reward", "metadata": {"quest": "q1"}},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Money added"
    assert body["new_balance"] == 1000
    assert body["transaction"]["type"] == "earn"
    assert body["transaction"]["status"] == "completed"
    assert body["transaction"]["metadata"] == {"quest": "q1"}

    res = client.post("/api/v1/transactions/spend", headers=headers, json={"currency": "coins", "amount": 400})
    assert res.status_code == 200
    assert res.json()["message"] == "Money spent"
    assert res.json()["new_balance"] == 600
    assert res.json()["transaction"]["amount"] == -400

    res = client.post("/api/v1/transactions/spend", headers=headers, json={"currency": "coins", "amount": 10000})
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["code"] == "invalid_argument"
    assert detail["message"] == "Insufficient balance"
    assert detail["balance"] == 600

    res = client.get("/api/v1/wallet/balance/coins", headers=headers)
    assert res.json() == {"currency": "coins", "balance": 600}


def test_invalid_currency_and_amount(client, make_player, auth_headers):
    headers = auth_headers(make_player("bea"))

    res = client.post("/api/v1/transactions/add", headers=headers, json={"currency": "gold", "amount": 10})
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "invalid_argument"
    assert res.json()["detail"]["allowed"] == ["coins", "gems", "tokens"]

    res = client.post("/api/v1/transactions/add", headers=headers, json={"currency": "coins", "amount": 0})
    assert res.status_code == 400


def test_locked_wallet_over_http(client, make_player, auth_headers):
    headers = auth_headers(make_player("cyd", coins=100, lock_reason="fraud check"))

    res = client.post("/api/v1/transactions/spend", headers=headers, json={"currency": "coins", "amount": 10})
    assert res.status_code == 403
    detail = res.json()["detail"]
    assert detail["code"] == "forbidden"
    assert detail["lock_reason"] == "fraud check"
    assert "fraud check" in detail["message"]


def test_missing_wallet_is_not_found(client, make_player, auth_headers):
    headers = auth_headers(make_player("dex", with_wallet=False))

    res = client.post("/api/v1/transactions/add", headers=headers, json={"currency": "coins", "amount": 10})
    assert res.status_code == 404
    assert res.json()["detail"] == {"code": "not_found", "message": "Wallet not found"}


def test_transfer_over_http(client, make_player, auth_headers):
    sender = make_player("eva", gems=50)
    receiver = make_player("flo")

    res = client.post(
        "/api/v1/transactions/transfer",
        headers=auth_headers(sender),
        json={"to_user_id": receiver.id, "currency": "gems", "amount": 20, "description": "gift"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Transfer completed"
    assert body["new_balance"] == 30
    assert body["to_user_id"] == receiver.id
    assert body["currency"] == "gems"
    assert body["transaction"]["reference"].startswith("transfer_")

    res = client.get("/api/v1/wallet/balances", headers=auth_headers(receiver))
    assert res.json()["gems"] == 20
    assert res.json()["total_value"] == 2000

    res = client.post(
        "/api/v1/transactions/transfer",
        headers=auth_headers(sender),
        json={"to_user_id": sender.id, "currency": "gems", "amount": 1},
    )
    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Cannot transfer to yourself"


def test_history_and_lookup(client, db_session, make_player, auth_headers):
    user = make_player("gil")
    stranger = make_player("hex")
    headers = auth_headers(user)
    for amount in (5, 10, 15):
        client.post("/api/v1/transactions/add", headers=headers, json={"currency": "coins", "amount": amount})
    client.post("/api/v1/transactions/spend", headers=headers, json={"currency": "coins", "amount": 3})

    res = client.get("/api/v1/transactions/history", headers=headers, params={"limit": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["pagination"] == {"limit": 2, "offset": 0, "total": 4}
    assert [item["type"] for item in body["transactions"]] == ["spend", "earn"]

    res = client.get("/api/v1/wallet/history", headers=headers, params={"limit": 0, "type": "earn"})
    body = res.json()
    assert body["pagination"]["limit"] == 20
    assert body["pagination"]["total"] == 3
    assert body["filters"] == {"type": "earn", "currency": None, "status": None}

    res = client.get("/api/v1/transactions/history", headers=headers, params={"status": "bogus"})
    assert res.status_code == 400

    entry_id = db_session.query(Transaction.id).order_by(Transaction.id.asc()).first()[0]
    res = client.get(f"/api/v1/transactions/{entry_id}", headers=headers)
    assert res.status_code == 200
    assert res.json()["amount"] == 5

    res = client.get(f"/api/v1/transactions/{entry_id}", headers=auth_headers(stranger))
    assert res.status_code == 404


def test_history_ignores_non_numeric_paging(client, make_player, auth_headers):
    headers = auth_headers(make_player("ivo"))
    client.post("/api/v1/transactions/add", headers=headers, json={"currency": "coins", "amount": 7})

    for path in ("/api/v1/transactions/history", "/api/v1/wallet/history"):
        res = client.get(path, headers=headers, params={"limit": "abc", "offset": "xyz"})
        assert res.status_code == 200
        assert res.json()["pagination"] == {"limit": 20, "offset": 0, "total": 1}
