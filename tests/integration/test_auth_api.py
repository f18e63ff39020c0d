"""Registration, login and the authentication chain over HTTP."""

import asyncio
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from jose import jwt

from jobboard.core.limiter import limiter
from jobboard.main import create_app
from jobboard.services.user_store import UserStore
from tests.conftest import TEST_PASSWORD, TEST_SECRET, auth_headers, register_user


def test_register_returns_token_and_public_user(client):
    token, user = register_user(client, "ann@example.com", role="recruiter", first="Ann")

    assert user["email"] == "ann@example.com"
    assert user["role"] == "recruiter"
    assert user["is_admin"] is False
    assert "password_hash" not in user

    claims = jwt.decode(token, TEST_SECRET, algorithms=["HS256"], audience="jobfinder-users",
                        issuer="jobfinder-app")
    assert claims["sub"] == user["id"]
    assert claims["role"] == "recruiter"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60


def test_register_duplicate_email_is_conflict(client):
    register_user(client, "dup@example.com")
    response = client.post(
        "/api/v1/users",
        json={
            "name": {"first": "Dup", "last": "User"},
            "email": "DUP@example.com",
            "password": TEST_PASSWORD,
        },
    )
    assert response.status_code == 409


def test_register_rejects_weak_password_and_admin_role(client):
    weak = client.post(
        "/api/v1/users",
        json={"name": {"first": "Weak", "last": "User"}, "email": "w@example.com", "password": "password"},
    )
    assert weak.status_code == 400

    admin = client.post(
        "/api/v1/users",
        json={
            "name": {"first": "Eve", "last": "User"},
            "email": "eve@example.com",
            "password": TEST_PASSWORD,
            "role": "admin",
        },
    )
    assert admin.status_code == 400


def test_login(client):
    register_user(client, "bob@example.com")

    ok = client.post("/api/v1/users/login", json={"email": "Bob@Example.com", "password": TEST_PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["token"]

    bad = client.post("/api/v1/users/login", json={"email": "bob@example.com", "password": "Wrong1234!"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid email or password"

    unknown = client.post("/api/v1/users/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD})
    assert unknown.status_code == 401


def test_check_auth_with_both_header_styles(client):
    token, user = register_user(client, "cara@example.com")

    bearer = client.get("/api/v1/users/check-auth", headers=auth_headers(token))
    assert bearer.status_code == 200
    assert bearer.json()["user"]["id"] == user["id"]

    custom = client.get("/api/v1/users/check-auth", headers={"x-auth-token": token})
    assert custom.status_code == 200


def test_protected_route_rejections(client, token_service):
    token, user = register_user(client, "dan@example.com")

    assert client.get("/api/v1/users/profile/me").status_code == 401
    assert client.get("/api/v1/users/profile/me", headers=auth_headers("garbage")).status_code == 401

    stale = token_service.issue(
        {"_id": user["id"], "role": "jobseeker", "name": user["name"]},
        now=datetime.now(timezone.utc) - timedelta(hours=25),
    )
    response = client.get("/api/v1/users/profile/me", headers=auth_headers(stale))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_deactivated_user_loses_access(client, mongo_db):
    token, user = register_user(client, "erin@example.com")
    asyncio.run(UserStore(mongo_db).set_active(user["id"], False))

    response = client.get("/api/v1/users/profile/me", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["detail"] == "Account has been deactivated"

    login = client.post("/api/v1/users/login", json={"email": "erin@example.com", "password": TEST_PASSWORD})
    assert login.status_code == 401


def test_deleted_user_token_is_rejected(client, mongo_db):
    token, user = register_user(client, "finn@example.com")
    asyncio.run(UserStore(mongo_db).delete(user["id"]))

    response = client.get("/api/v1/users/check-auth", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_profile_update(client):
    token, user = register_user(client, "gail@example.com")

    response = client.put(
        "/api/v1/users/profile/me",
        headers=auth_headers(token),
        json={"bio": "Likes Python", "profession": "Engineer"},
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "Likes Python"

    escalate = client.put("/api/v1/users/profile/me", headers=auth_headers(token), json={"role": "admin"})
    assert escalate.status_code == 403


def test_user_routes_are_self_or_admin(client, admin_token):
    token_a, user_a = register_user(client, "a@example.com", first="Alpha")
    token_b, _ = register_user(client, "b@example.com", first="Bravo")

    assert client.get(f"/api/v1/users/{user_a['id']}", headers=auth_headers(token_a)).status_code == 200
    assert client.get(f"/api/v1/users/{user_a['id']}", headers=auth_headers(token_b)).status_code == 403
    assert client.get(f"/api/v1/users/{user_a['id']}", headers=auth_headers(admin_token)).status_code == 200


def test_logout(client):
    token, _ = register_user(client, "hal@example.com")
    response = client.post("/api/v1/users/logout", headers=auth_headers(token))
    assert response.status_code == 200


def test_login_is_rate_limited(test_settings, mongo_db):
    limiter.reset()
    app = create_app(test_settings.model_copy(update={"RATE_LIMIT_ENABLED": True}), database=mongo_db)
    try:
        with TestClient(app) as client:
            attempts = [
                client.post("/api/v1/users/login", json={"email": "x@example.com", "password": "Wrong1234!"})
                for _ in range(11)
            ]
        assert [r.status_code for r in attempts[:10]] == [401] * 10
        assert attempts[10].status_code == 429
        assert attempts[10].json()["code"] == "rate_limited"
    finally:
        limiter.reset()
        limiter.enabled = False
