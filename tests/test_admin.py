import pytest

from app.services.economy import EconomyEngine


@pytest.fixture
def admin_headers(make_player, auth_headers):
    return auth_headers(make_player("overseer", role="admin"))


def test_admin_routes_reject_players(client, make_player, auth_headers):
    player = make_player("pleb")
    headers = auth_headers(player)

    for path, body in (
        ("/api/v1/admin/transactions/1/reverse", None),
        (f"/api/v1/admin/wallets/{player.id}/adjust", {"type": "reward", "currency": "coins", "amount": 1}),
        (f"/api/v1/admin/wallets/{player.id}/lock", {"reason": "x"}),
        (f"/api/v1/admin/wallets/{player.id}/unlock", None),
    ):
        res = client.post(path, headers=headers, json=body)
        assert res.status_code == 403
        assert res.json()["detail"] == "Admin access required"


def test_reverse_transaction(client, db_session, make_player, admin_headers, auth_headers):
    player = make_player("tam")
    entry, _ = EconomyEngine(db_session).add_money(player.id, "coins", 250)

    res = client.post(
        f"/api/v1/admin/transactions/{entry.id}/reverse",
        headers=admin_headers,
        json={"reason": "granted twice"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Transaction reversed"
    [reversal] = body["reversals"]
    assert reversal["amount"] == -250
    assert reversal["reverses_id"] == entry.id
    assert reversal["category"] == "reversal"

    balance = client.get("/api/v1/wallet/balance/coins", headers=auth_headers(player)).json()
    assert balance["balance"] == 0

    res = client.post(f"/api/v1/admin/transactions/{entry.id}/reverse", headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "conflict"

    res = client.post("/api/v1/admin/transactions/9999/reverse", headers=admin_headers)
    assert res.status_code == 404


def test_adjust_balance(client, make_player, admin_headers):
    player = make_player("uri", gems=10)

    res = client.post(
        f"/api/v1/admin/wallets/{player.id}/adjust",
        headers=admin_headers,
        json={"type": "penalty", "currency": "gems", "amount": 4, "description": "abuse"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["new_balance"] == 6
    assert body["transaction"]["type"] == "penalty"
    assert body["transaction"]["description"] == "abuse"

    res = client.post(
        f"/api/v1/admin/wallets/{player.id}/adjust",
        headers=admin_headers,
        json={"type": "spend", "currency": "gems", "amount": 1},
    )
    assert res.status_code == 400


def test_admin_lock_and_unlock(client, make_player, admin_headers, auth_headers):
    player = make_player("val", coins=5)

    res = client.post(f"/api/v1/admin/wallets/{player.id}/lock", headers=admin_headers, json={"reason": "audit"})
    assert res.status_code == 200
    assert res.json()["is_locked"] is True
    assert res.json()["lock_reason"] == "audit"

    res = client.post("/api/v1/transactions/spend", headers=auth_headers(player), json={"currency": "coins", "amount": 1})
    assert res.status_code == 403

    res = client.post(f"/api/v1/admin/wallets/{player.id}/unlock", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["is_locked"] is False

    assert client.post("/api/v1/admin/wallets/9999/unlock", headers=admin_headers).status_code == 404
