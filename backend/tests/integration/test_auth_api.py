"""End-to-end tests for the ``/api/v1/auth`` endpoints."""

from __future__ import annotations

import pytest
from malldir.core.config import TestingConfig
from malldir.core.extensions import db as _db
from malldir.factory import create_app

from tests.factories.account import AccountFactory
from tests.helpers.http import API, json_headers, login, refresh_cookie

CREDENTIALS_MESSAGE = "Invalid email or password."
TOKEN_MESSAGE = "Invalid or expired token. Please log in again."


def _register(client, **overrides):
    body = {"username": "mall-fan", "email": "fan@example.com", "password": "long-password"}
    body.update(overrides)
    return client.post(f"{API}/auth/register", json=body)


# -------------------------------- Register --------------------------------- #
def test_register_returns_session_and_cookie(client):
    resp = _register(client)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"]
    assert body["accessToken"]
    assert body["user"]["email"] == "fan@example.com"
    assert body["user"]["role"] == "user"
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]

    set_cookie = resp.headers.get("Set-Cookie")
    assert set_cookie.startswith("refreshToken=")
    assert "HttpOnly" in set_cookie
    assert "SameSite=Strict" in set_cookie
    assert "Path=/api" in set_cookie
    assert refresh_cookie(client)


def test_register_duplicate_email_is_conflict(client):
    assert _register(client).status_code == 201
    resp = _register(client, username="someone-else", email="FAN@example.com")

    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["code"] == "conflict"


def test_register_duplicate_username_is_conflict(client):
    assert _register(client).status_code == 201
    resp = _register(client, email="other@example.com")
    assert resp.status_code == 409


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "not-an-email"},
        {"password": "short"},
        {"password": "x" * 73},
        {"username": "ab"},
    ],
)
def test_register_validation(client, overrides):
    resp = _register(client, **overrides)
    assert resp.status_code == 422
    assert resp.get_json()["code"] == "validation_error"
    assert resp.get_json()["details"]["errors"]


def test_register_cannot_self_assign_admin(client):
    resp = _register(client, role="admin")
    assert resp.status_code == 422


# --------------------------------- Login ----------------------------------- #
def test_login_success(client):
    account = AccountFactory(email="shop@example.com")
    resp = client.post(
        f"{API}/auth/login", json={"email": "SHOP@example.com", "password": "Passw0rd!"}
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["accessToken"]
    assert body["user"]["id"] == account.id
    assert body["user"]["lastLoginAt"] is not None
    assert refresh_cookie(client)


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ghost@example.com", "password": "Passw0rd!"},
        {"email": "shop@example.com", "password": "wrong-password"},
        {"email": "shop@example.com", "password": "x"},
        {"email": "off@example.com", "password": "Passw0rd!"},
    ],
)
def test_login_failures_look_identical(client, payload):
    AccountFactory(email="shop@example.com")
    AccountFactory(email="off@example.com", inactive=True)

    resp = client.post(f"{API}/auth/login", json=payload)

    assert resp.status_code == 401
    assert resp.get_json()["message"] == CREDENTIALS_MESSAGE
    assert resp.headers.get("Set-Cookie") is None


def test_login_validation(client):
    resp = client.post(f"{API}/auth/login", json={"email": "shop@example.com"})
    assert resp.status_code == 422


# ----------------------- Profile / Logout / Status ------------------------- #
def test_profile_requires_token(client):
    resp = client.get(f"{API}/profile")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == TOKEN_MESSAGE


def test_profile_returns_token_identity(client):
    account = AccountFactory(username="visitor")
    token = login(client, account.email)

    resp = client.get(f"{API}/profile", headers=json_headers(token))

    assert resp.status_code == 200
    assert resp.get_json()["user"] == {"id": account.id, "username": "visitor", "role": "user"}


def test_profile_without_identity_is_unauthorized(client, monkeypatch):
    from malldir.api.v1 import profile as profile_module

    token = login(client, AccountFactory().email)
    monkeypatch.setattr(profile_module, "current_identity", lambda: None)

    resp = client.get(f"{API}/profile", headers=json_headers(token))

    assert resp.status_code == 401
    assert resp.get_json()["message"] == TOKEN_MESSAGE


@pytest.mark.parametrize(
    "header",
    ["Bearer not-a-token", "Basic dXNlcjpwYXNz", "Bearer "],
)
def test_token_failures_share_one_message(client, header):
    resp = client.get(f"{API}/profile", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == TOKEN_MESSAGE


def test_logout_revokes_access_token_and_clears_cookie(client):
    account = AccountFactory()
    token = login(client, account.email)

    resp = client.post(f"{API}/auth/logout", headers=json_headers(token))

    assert resp.status_code == 200
    assert resp.get_json()["message"]
    set_cookie = resp.headers.get("Set-Cookie")
    assert set_cookie.startswith("refreshToken=;")
    assert "Path=/api" in set_cookie
    assert refresh_cookie(client) is None

    again = client.get(f"{API}/profile", headers=json_headers(token))
    assert again.status_code == 401
    assert again.get_json()["message"] == TOKEN_MESSAGE


def test_logout_without_token_still_succeeds(client):
    resp = client.post(f"{API}/auth/logout")
    assert resp.status_code == 200


def test_logout_all_revokes_refresh_sessions(client):
    account = AccountFactory()
    token = login(client, account.email)
    old_refresh = refresh_cookie(client)

    resp = client.post(f"{API}/auth/logout?all=true", headers=json_headers(token))
    assert resp.status_code == 200

    client.set_cookie("refreshToken", old_refresh, path="/api")
    assert client.post(f"{API}/auth/refresh").status_code == 401


def test_logout_all_without_valid_token_is_unauthorized(client):
    resp = client.post(f"{API}/auth/logout?all=true")
    assert resp.status_code == 401


def test_status_reports_both_states(client):
    anonymous = client.get(f"{API}/auth/status")
    assert anonymous.status_code == 200
    assert anonymous.get_json()["status"] is False
    assert anonymous.get_json()["user"] is None

    account = AccountFactory()
    token = login(client, account.email)
    authed = client.get(f"{API}/auth/status", headers=json_headers(token))
    assert authed.status_code == 200
    assert authed.get_json()["status"] is True
    assert authed.get_json()["user"]["id"] == account.id

    client.post(f"{API}/auth/logout", headers=json_headers(token))
    after = client.get(f"{API}/auth/status", headers=json_headers(token))
    assert after.status_code == 200
    assert after.get_json()["status"] is False


# -------------------------------- Refresh ---------------------------------- #
def test_refresh_rotates_cookie_and_issues_access_token(client):
    account = AccountFactory()
    login(client, account.email)
    first = refresh_cookie(client)

    resp = client.post(f"{API}/auth/refresh")

    assert resp.status_code == 200
    token = resp.get_json()["accessToken"]
    second = refresh_cookie(client)
    assert second and second != first
    assert client.get(f"{API}/profile", headers=json_headers(token)).status_code == 200


def test_refresh_reuse_is_rejected_and_kills_the_family(client):
    account = AccountFactory()
    login(client, account.email)
    first = refresh_cookie(client)
    assert client.post(f"{API}/auth/refresh").status_code == 200
    second = refresh_cookie(client)

    client.set_cookie("refreshToken", first, path="/api")
    reuse = client.post(f"{API}/auth/refresh")
    assert reuse.status_code == 401
    assert reuse.get_json()["message"] == TOKEN_MESSAGE

    client.set_cookie("refreshToken", second, path="/api")
    assert client.post(f"{API}/auth/refresh").status_code == 401


def test_session_survives_logout_through_refresh(client):
    """login -> T1 ok -> logout -> T1 rejected -> refresh with R1 -> T2 ok."""
    account = AccountFactory()
    account_id = account.id
    first_token = login(client, account.email)
    first_refresh = refresh_cookie(client)
    assert client.get(f"{API}/profile", headers=json_headers(first_token)).status_code == 200

    assert client.post(f"{API}/auth/logout", headers=json_headers(first_token)).status_code == 200
    revoked = client.get(f"{API}/profile", headers=json_headers(first_token))
    assert revoked.status_code == 401
    assert revoked.get_json()["message"] == TOKEN_MESSAGE

    client.set_cookie("refreshToken", first_refresh, path="/api")
    resp = client.post(f"{API}/auth/refresh")
    assert resp.status_code == 200
    second_token = resp.get_json()["accessToken"]
    assert second_token != first_token

    profile = client.get(f"{API}/profile", headers=json_headers(second_token))
    assert profile.status_code == 200
    assert profile.get_json()["user"]["id"] == account_id


def test_refresh_without_cookie(client):
    resp = client.post(f"{API}/auth/refresh")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == TOKEN_MESSAGE


def test_refresh_with_garbage_cookie(client):
    client.set_cookie("refreshToken", "garbage", path="/api")
    assert client.post(f"{API}/auth/refresh").status_code == 401


# ------------------------------ Rate limiting ------------------------------ #
def test_login_is_rate_limited():
    class Limited(TestingConfig):
        RATELIMIT_ENABLED = True
        AUTH_LOGIN_RATE_LIMIT = "2 per minute"

    app = create_app(Limited, instance_relative_config=False)
    with app.app_context():
        _db.create_all()
        try:
            client = app.test_client()
            payload = {"email": "ghost@example.com", "password": "whatever"}
            codes = [client.post(f"{API}/auth/login", json=payload).status_code for _ in range(3)]
            assert codes == [401, 401, 429]
            limited = client.post(f"{API}/auth/login", json=payload)
            assert limited.mimetype == "application/problem+json"
        finally:
            _db.session.remove()
            _db.drop_all()
