"""Refresh session store contract, in-memory and Redis-backed (fakeredis)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from freezegun import freeze_time
from malldir.infra.redis.refresh_session_store import RedisRefreshSessionStore
from malldir.services._shared.ports import InMemoryRefreshSessionStore, RotationResult


def _now() -> datetime:
    return datetime.now(UTC)


@pytest.fixture(params=["memory", "redis"])
def store(request):
    if request.param == "memory":
        return InMemoryRefreshSessionStore()
    return RedisRefreshSessionStore(r=fakeredis.FakeRedis())


def _register(store, jti: str, account_id: int = 1, ttl: int = 300) -> datetime:
    now = _now()
    store.register(
        jti=jti, account_id=account_id, issued_at=now, expires_at=now + timedelta(seconds=ttl)
    )
    return now


def test_register_and_get(store):
    _register(store, "jti-1", account_id=42)

    view = store.get("jti-1")
    assert view is not None
    assert view.account_id == 42
    assert view.used is False
    assert view.revoked is False
    assert view.expires_at > _now()


def test_new_jti_is_unique(store):
    assert store.new_jti() != store.new_jti()


def test_get_unknown_returns_none(store):
    assert store.get("missing") is None


def test_rotate_ok_consumes_old_and_creates_new(store):
    now = _register(store, "jti-1")

    result = store.rotate(
        old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=now + timedelta(seconds=300)
    )

    assert result is RotationResult.OK
    assert store.get("jti-1").used is True
    new = store.get("jti-2")
    assert new is not None
    assert new.used is False
    assert new.account_id == 1


def test_rotate_twice_is_reuse(store):
    now = _register(store, "jti-1")
    later = now + timedelta(seconds=300)
    assert store.rotate(old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=later) is (
        RotationResult.OK
    )
    assert store.rotate(old_jti="jti-1", new_jti="jti-3", now=now, new_expires_at=later) is (
        RotationResult.REUSED
    )
    assert store.get("jti-3") is None


def test_rotate_unknown(store):
    now = _now()
    result = store.rotate(
        old_jti="nope", new_jti="jti-2", now=now, new_expires_at=now + timedelta(seconds=60)
    )
    assert result is RotationResult.NOT_FOUND


def test_rotate_expired(store):
    now = _register(store, "jti-1", ttl=60)
    result = store.rotate(
        old_jti="jti-1",
        new_jti="jti-2",
        now=now + timedelta(seconds=61),
        new_expires_at=now + timedelta(seconds=600),
    )
    assert result is RotationResult.EXPIRED


def test_rotate_revoked(store):
    now = _register(store, "jti-1")
    assert store.mark_revoked("jti-1") is True

    result = store.rotate(
        old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=now + timedelta(seconds=60)
    )
    assert result is RotationResult.REVOKED


def test_mark_revoked_unknown(store):
    assert store.mark_revoked("missing") is False


def test_revoke_all_for_account_only_touches_that_account(store):
    _register(store, "a-1", account_id=1)
    _register(store, "a-2", account_id=1)
    _register(store, "b-1", account_id=2)

    assert store.revoke_all_for_account(1) == 2

    assert store.get("a-1").revoked is True
    assert store.get("a-2").revoked is True
    assert store.get("b-1").revoked is False
    assert store.revoke_all_for_account(1) == 0


def test_revoke_all_covers_rotated_sessions(store):
    now = _register(store, "jti-1", account_id=5)
    store.rotate(
        old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=now + timedelta(seconds=60)
    )

    store.revoke_all_for_account(5)
    assert store.get("jti-2").revoked is True


def test_redis_sessions_carry_a_ttl():
    r = fakeredis.FakeRedis()
    store = RedisRefreshSessionStore(r=r)
    _register(store, "jti-1", ttl=120)
    assert 0 < r.ttl("rt:jti-1") <= 120


def test_memory_store_purges_expired_sessions():
    store = InMemoryRefreshSessionStore()
    with freeze_time("2026-03-01 12:00:00") as frozen:
        now = _register(store, "jti-1", account_id=7, ttl=60)
        store.rotate(
            old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=now + timedelta(seconds=60)
        )
        assert len(store) == 2

        frozen.tick(timedelta(seconds=61))
        _register(store, "jti-3", account_id=8, ttl=60)

        assert store.get("jti-1") is None
        assert store.get("jti-2") is None
        assert len(store) == 1
        assert store.revoke_all_for_account(7) == 0


def test_memory_store_keeps_used_sessions_until_expiry():
    store = InMemoryRefreshSessionStore()
    with freeze_time("2026-03-01 12:00:00") as frozen:
        now = _register(store, "jti-1", ttl=60)
        later = now + timedelta(seconds=600)
        store.rotate(old_jti="jti-1", new_jti="jti-2", now=now, new_expires_at=later)

        frozen.tick(timedelta(seconds=30))
        _register(store, "jti-3", account_id=2)

        reuse = store.rotate(
            old_jti="jti-1", new_jti="jti-4", now=now + timedelta(seconds=30), new_expires_at=later
        )
        assert reuse is RotationResult.REUSED
