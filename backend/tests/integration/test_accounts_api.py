"""End-to-end tests for ``/api/v1/accounts``."""

from __future__ import annotations

import logging

from malldir.models.account import Account

from tests.factories.account import AccountFactory
from tests.helpers.http import API, json_headers, login


def test_list_requires_admin(client):
    user = AccountFactory()
    token = login(client, user.email)

    assert client.get(f"{API}/accounts").status_code == 401
    resp = client.get(f"{API}/accounts", headers=json_headers(token))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "forbidden"


def test_admin_gate_writes_audit_line(client, caplog):
    admin = AccountFactory(admin=True)
    token = login(client, admin.email)

    with caplog.at_level(logging.INFO, logger="malldir.api.deps"):
        resp = client.get(f"{API}/accounts", headers=json_headers(token))

    assert resp.status_code == 200
    audit = [r for r in caplog.records if r.getMessage().startswith("Admin action")]
    assert [r.getMessage() for r in audit] == [f"Admin action GET {API}/accounts"]
    assert audit[0].account_id == admin.id


def test_denied_admin_gate_writes_no_audit_line(client, caplog):
    token = login(client, AccountFactory().email)

    with caplog.at_level(logging.INFO, logger="malldir.api.deps"):
        client.get(f"{API}/accounts", headers=json_headers(token))

    assert not [r for r in caplog.records if r.getMessage().startswith("Admin action")]


def test_admin_lists_accounts_with_meta(client):
    admin = AccountFactory(admin=True)
    for _ in range(3):
        AccountFactory()
    token = login(client, admin.email)

    resp = client.get(f"{API}/accounts?page=1&limit=2&sort=-id", headers=json_headers(token))

    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"total": 4, "page": 1, "limit": 2, "hasPrev": False, "hasNext": True}
    assert body["data"][0]["id"] > body["data"][1]["id"]
    assert all("password_hash" not in item for item in body["data"])


def test_list_rejects_bad_pagination(client):
    admin = AccountFactory(admin=True)
    token = login(client, admin.email)
    resp = client.get(f"{API}/accounts?page=0", headers=json_headers(token))
    assert resp.status_code == 422


def test_owner_reads_own_account(client):
    me = AccountFactory()
    token = login(client, me.email)

    resp = client.get(f"{API}/accounts/{me.id}", headers=json_headers(token))

    assert resp.status_code == 200
    assert resp.get_json()["data"]["email"] == me.email


def test_stranger_is_forbidden(client):
    me = AccountFactory()
    other = AccountFactory()
    token = login(client, me.email)

    resp = client.get(f"{API}/accounts/{other.id}", headers=json_headers(token))
    assert resp.status_code == 403


def test_admin_reads_other_and_missing(client):
    admin = AccountFactory(admin=True)
    other = AccountFactory()
    token = login(client, admin.email)

    assert client.get(f"{API}/accounts/{other.id}", headers=json_headers(token)).status_code == 200
    missing = client.get(f"{API}/accounts/9999", headers=json_headers(token))
    assert missing.status_code == 404
    assert missing.mimetype == "application/problem+json"


def test_owner_patches_profile(client, session):
    me = AccountFactory()
    token = login(client, me.email)

    resp = client.patch(
        f"{API}/accounts/{me.id}",
        json={"username": "new-name", "password": "brand-new-password"},
        headers=json_headers(token),
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "new-name"
    session.expire_all()
    assert session.get(Account, me.id).verify_password("brand-new-password")
    assert login(client, me.email, "brand-new-password")


def test_patch_cannot_touch_role_or_status(client):
    me = AccountFactory()
    token = login(client, me.email)

    for body in ({"role": "admin"}, {"status": "inactive"}, {}):
        resp = client.patch(f"{API}/accounts/{me.id}", json=body, headers=json_headers(token))
        assert resp.status_code == 422


def test_patch_stranger_gets_403_before_validation(client):
    me = AccountFactory()
    other = AccountFactory()
    token = login(client, me.email)

    resp = client.patch(
        f"{API}/accounts/{other.id}", json={"role": "admin"}, headers=json_headers(token)
    )
    assert resp.status_code == 403


def test_patch_duplicate_email(client):
    me = AccountFactory()
    AccountFactory(email="taken@example.com")
    token = login(client, me.email)

    resp = client.patch(
        f"{API}/accounts/{me.id}", json={"email": "taken@example.com"}, headers=json_headers(token)
    )
    assert resp.status_code == 409


def test_admin_patches_other_account(client):
    admin = AccountFactory(admin=True)
    other = AccountFactory()
    token = login(client, admin.email)

    resp = client.patch(
        f"{API}/accounts/{other.id}", json={"username": "renamed"}, headers=json_headers(token)
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "renamed"
