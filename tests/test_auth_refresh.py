from app.core.security import create_access_token
from app.models import RefreshToken


def _register(client, username="newbie", password="Password123!"):
    return client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "display_name": "New Player",
            "email": f"{username}@example.com",
            "password": password,
        },
    )


def _login(client, username="newbie", password="Password123!"):
    return client.post("/api/v1/auth/login", json={"username": username, "password": password})


def test_register_and_login_issue_token_pair(client):
    res = _register(client)
    assert res.status_code == 201
    body = res.json()
    assert body["username"] == "newbie"
    assert body["role"] == "user"
    assert "hashed_password" not in body

    res = _login(client)
    assert res.status_code == 200
    tokens = res.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["expires_in"] == 30 * 60
    assert tokens["access_token"] and tokens["refresh_token"]


def test_register_rejects_duplicates_and_weak_passwords(client):
    assert _register(client).status_code == 201

    res = _register(client)
    assert res.status_code == 409
    assert res.json()["detail"] == "Username or email already registered"

    assert _register(client, username="weakling", password="password").status_code == 422
    assert _register(client, username="x", password="Password123!").status_code == 422


def test_login_with_wrong_password(client):
    _register(client)
    res = _login(client, password="Wrong123!")
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials"


def test_login_inactive_user(client, db_session, make_player):
    user = make_player("dormant")
    user.is_active = False
    db_session.commit()

    res = _login(client, username="dormant")
    assert res.status_code == 403
    assert res.json()["detail"] == "User is inactive"


def test_refresh_returns_new_access_token_and_same_refresh_token(client):
    _register(client)
    tokens = _login(client).json()

    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    body = res.json()
    assert body["refresh_token"] == tokens["refresh_token"]

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "newbie"


def test_refresh_rejects_access_token(client):
    _register(client)
    tokens = _login(client).json()

    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid refresh token"


def test_refresh_rejects_garbage(client):
    res = client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid refresh token"


def test_logout_revokes_refresh_token(client, db_session):
    _register(client)
    tokens = _login(client).json()

    res = client.post("/api/v1/auth/logout", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    assert res.json() == {"message": "Logged out"}

    stored = db_session.query(RefreshToken).filter(RefreshToken.token == tokens["refresh_token"]).one()
    assert stored.is_revoked is True

    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 401
    assert res.json()["detail"] == "Refresh token revoked or expired"


def test_logout_unknown_token(client):
    res = client.post("/api/v1/auth/logout", json={"refresh_token": "missing"})
    assert res.status_code == 404
    assert res.json()["detail"] == "Refresh token not found"


def test_protected_route_requires_valid_access_token(client, make_player):
    user = make_player("guard")

    assert client.get("/api/v1/users/me").status_code == 401
    res = client.get("/api/v1/users/me", headers={"Authorization": "Bearer nonsense"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token"

    token = create_access_token(str(user.id + 999), "user")
    res = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["detail"] == "User not found or inactive"
