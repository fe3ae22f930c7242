"""Revocation registry behaviour, in-memory and Redis-backed (fakeredis)."""

from __future__ import annotations

from datetime import timedelta

import fakeredis
import pytest
from freezegun import freeze_time
from malldir.infra.redis.revocation_registry import RedisRevocationRegistry
from malldir.services._shared.ports import InMemoryRevocationRegistry

TTL = timedelta(minutes=15)


@pytest.fixture(params=["memory", "redis"])
def registry(request):
    if request.param == "memory":
        return InMemoryRevocationRegistry(ttl=TTL)
    return RedisRevocationRegistry(fakeredis.FakeRedis(), ttl=TTL)


def test_add_then_has(registry):
    assert registry.has("tok-a") is False
    registry.add("tok-a")
    assert registry.has("tok-a") is True
    assert registry.has("tok-b") is False


def test_add_is_idempotent(registry):
    registry.add("tok-a")
    registry.add("tok-a")
    assert registry.has("tok-a") is True


def test_empty_token_is_ignored(registry):
    registry.add("")
    assert registry.has("") is False


def test_memory_entries_expire_after_ttl():
    registry = InMemoryRevocationRegistry(ttl=TTL)
    with freeze_time("2026-01-01 12:00:00") as frozen:
        registry.add("tok-a")
        registry.add("tok-b")
        assert len(registry) == 2

        frozen.tick(TTL + timedelta(seconds=1))
        assert registry.has("tok-a") is False
        assert len(registry) == 0


def test_redis_keys_are_hashed_and_expire():
    r = fakeredis.FakeRedis()
    registry = RedisRevocationRegistry(r, ttl=TTL)
    registry.add("eyJraw.token.value")

    keys = r.keys("deny:at:*")
    assert len(keys) == 1
    assert b"eyJraw" not in keys[0]
    assert 0 < r.ttl(keys[0]) <= int(TTL.total_seconds())


def test_redis_registry_shared_between_instances():
    r = fakeredis.FakeRedis()
    RedisRevocationRegistry(r, ttl=TTL).add("tok-a")
    assert RedisRevocationRegistry(r, ttl=TTL).has("tok-a") is True
