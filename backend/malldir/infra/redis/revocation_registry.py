from __future__ import annotations

import hashlib
from datetime import timedelta
from typing import cast

import redis  # type: ignore[import-untyped]


class RedisRevocationRegistry:
    """
    Shared revocation registry for **access tokens**.

    Tokens are stored as SHA-256 digests with a TTL equal to the access-token
    lifetime, so every worker sees the same set and Redis expires the rest.
    """

    def __init__(self, r: redis.Redis, ttl: timedelta):
        self.r = r
        self.ttl_seconds = max(1, int(ttl.total_seconds()))

    @staticmethod
    def _k(token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"deny:at:{digest}"

    def add(self, token: str) -> None:
        if not token:
            return
        # marker with TTL; idempotent
        self.r.set(self._k(token), "1", ex=self.ttl_seconds)

    def has(self, token: str) -> bool:
        if not token:
            return False
        return cast(int, self.r.exists(self._k(token))) == 1
