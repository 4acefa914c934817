from datetime import timedelta

from app.models import GameSession
from app.utils.timeutils import utcnow


def test_start_session(client, make_player, auth_headers):
    headers = auth_headers(make_player("wyn"))

    res = client.post("/api/v1/game-sessions", headers=headers, json={"platform": "ios"})
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "active"
    assert body["platform"] == "ios"
    assert body["activity_status"] == "online"
    assert body["actions_count"] == 0


def test_start_session_requires_profile(client, make_player, auth_headers):
    headers = auth_headers(make_player("xan", with_profile=False))

    res = client.post("/api/v1/game-sessions", headers=headers, json={})
    assert res.status_code == 404


def test_new_session_ends_previous(client, make_player, auth_headers):
    headers = auth_headers(make_player("yul"))
    first = client.post("/api/v1/game-sessions", headers=headers, json={}).json()
    second = client.post("/api/v1/game-sessions", headers=headers, json={}).json()

    active = client.get("/api/v1/game-sessions/active", headers=headers).json()
    assert [item["id"] for item in active] == [second["id"]]

    res = client.post(f"/api/v1/game-sessions/{first['id']}/heartbeat", headers=headers)
    assert res.status_code == 409


def test_heartbeat_records_activity_and_data(client, make_player, auth_headers):
    headers = auth_headers(make_player("zed"))
    session = client.post("/api/v1/game-sessions", headers=headers, json={}).json()

    res = client.post(
        f"/api/v1/game-sessions/{session['id']}/heartbeat",
        headers=headers,
        json={"session_data": {"map": "harbor", "score": 12}},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["actions_count"] == 1
    assert body["session_data"] == {"map": "harbor", "score": 12}

    res = client.post(f"/api/v1/game-sessions/{session['id']}/heartbeat", headers=headers)
    assert res.json()["actions_count"] == 2
    assert res.json()["session_data"]["map"] == "harbor"


def test_idle_session_expires(client, db_session, make_player, auth_headers):
    headers = auth_headers(make_player("abe"))
    session = client.post("/api/v1/game-sessions", headers=headers, json={}).json()

    stored = db_session.get(GameSession, session["id"])
    stored.last_activity = utcnow() - timedelta(minutes=45)
    db_session.commit()

    res = client.post(f"/api/v1/game-sessions/{session['id']}/heartbeat", headers=headers)
    assert res.status_code == 409
    assert res.json()["detail"]["status"] == "expired"

    assert client.get("/api/v1/game-sessions/active", headers=headers).json() == []


def test_idle_sessions_are_dropped_from_active_list(client, db_session, make_player, auth_headers):
    headers = auth_headers(make_player("bex"))
    session = client.post("/api/v1/game-sessions", headers=headers, json={}).json()

    stored = db_session.get(GameSession, session["id"])
    stored.last_activity = utcnow() - timedelta(hours=2)
    db_session.commit()

    assert client.get("/api/v1/game-sessions/active", headers=headers).json() == []
    db_session.expire_all()
    assert db_session.get(GameSession, session["id"]).status == "expired"


def test_end_session(client, make_player, auth_headers):
    headers = auth_headers(make_player("cal"))
    session = client.post("/api/v1/game-sessions", headers=headers, json={}).json()

    res = client.post(f"/api/v1/game-sessions/{session['id']}/end", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "inactive"
    assert body["ended_at"] is not None
    assert body["activity_status"] == "offline"

    res = client.post(f"/api/v1/game-sessions/{session['id']}/end", headers=headers)
    assert res.status_code == 409

    assert client.post("/api/v1/game-sessions/9999/end", headers=headers).status_code == 404


def test_sessions_are_scoped_to_owner(client, make_player, auth_headers):
    owner = auth_headers(make_player("dee"))
    other = auth_headers(make_player("eli"))
    session = client.post("/api/v1/game-sessions", headers=owner, json={}).json()

    assert client.post(f"/api/v1/game-sessions/{session['id']}/end", headers=other).status_code == 404
