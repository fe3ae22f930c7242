# reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

import redis  # type: ignore[import-untyped]

from malldir.services._shared.ports import (
    RefreshSessionStore,
    RefreshSessionView,
    RotationResult,
)


def _b(s: bytes | None, default: str = "") -> str:
    return s.decode() if s is not None else default


@dataclass(slots=True)
class RedisRefreshSessionStore(RefreshSessionStore):
    """
    Redis-backed refresh session store with atomic rotation.

    Layout: one hash per session (``rt:<jti>``) plus a set of jtis per
    account (``rt:a:<account_id>``).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    @staticmethod
    def _k(jti: str) -> str:
        return f"rt:{jti}"

    @staticmethod
    def _ka(account_id: int | str) -> str:
        return f"rt:a:{account_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    def new_jti(self) -> str:
        return uuid4().hex

    def register(
        self, *, jti: str, account_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        """
        Insert the session *before* the token reaches the client, so no
        issued refresh token ever lacks a server-side record.
        """
        key = self._k(jti)
        ttl = max(1, self._to_ts(expires_at) - self._to_ts(datetime.now(UTC)))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "account_id": str(account_id),
                "issued_at": str(self._to_ts(issued_at)),
                "expires_at": str(self._to_ts(expires_at)),
                "used": "0",
                "revoked": "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._ka(account_id), jti)
        pipe.execute()

    def rotate(
        self, *, old_jti: str, new_jti: str, now: datetime, new_expires_at: datetime
    ) -> RotationResult:
        """
        Atomically consume ``old_jti`` and create ``new_jti``.

        Uses WATCH/MULTI/EXEC: a concurrent rotation of the same session
        aborts the transaction and the retry then observes ``used=1``.
        """
        now_ts = self._to_ts(now)
        new_exp_ts = self._to_ts(new_expires_at)
        ttl = max(1, new_exp_ts - now_ts)
        k_old = self._k(old_jti)
        k_new = self._k(new_jti)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old, k_new)
                    h = p.hgetall(k_old)
                    if not h:
                        p.unwatch()
                        return RotationResult.NOT_FOUND

                    account_id = _b(h.get(b"account_id"))
                    if int(_b(h.get(b"expires_at"), "0")) <= now_ts:
                        p.unwatch()
                        return RotationResult.EXPIRED
                    if _b(h.get(b"revoked"), "0") == "1":
                        p.unwatch()
                        return RotationResult.REVOKED
                    if _b(h.get(b"used"), "0") == "1":
                        p.unwatch()
                        return RotationResult.REUSED

                    p.multi()
                    p.hset(k_old, "used", "1")
                    p.hset(
                        k_new,
                        mapping={
                            "account_id": account_id,
                            "issued_at": str(now_ts),
                            "expires_at": str(new_exp_ts),
                            "used": "0",
                            "revoked": "0",
                        },
                    )
                    p.expire(k_new, ttl)
                    p.sadd(self._ka(account_id), new_jti)
                    p.execute()
                return RotationResult.OK
            except redis.WatchError:
                continue

    def mark_revoked(self, jti: str) -> bool:
        key = self._k(jti)
        account_id = self.r.hget(key, "account_id")
        if not account_id:
            return False
        with self.r.pipeline(transaction=True) as p:
            p.hset(key, "revoked", "1")
            p.srem(self._ka(_b(account_id)), jti)
            p.execute()
        return True

    def revoke_all_for_account(self, account_id: int) -> int:
        key_a = self._ka(account_id)
        jtis = [_b(m) if isinstance(m, bytes) else str(m) for m in self.r.smembers(key_a)]
        if not jtis:
            return 0
        pipe = self.r.pipeline(transaction=True)
        for j in jtis:
            # only touch hashes that still exist; hset would resurrect expired ones
            pipe.exists(self._k(j))
        alive = pipe.execute()

        pipe = self.r.pipeline(transaction=True)
        for j, exists in zip(jtis, alive, strict=True):
            if exists:
                pipe.hset(self._k(j), "revoked", "1")
        pipe.delete(key_a)
        pipe.execute()
        return len(jtis)

    def get(self, jti: str) -> RefreshSessionView | None:
        h = self.r.hgetall(self._k(jti))
        if not h:
            return None
        return RefreshSessionView(
            jti=jti,
            account_id=int(_b(h.get(b"account_id"), "0")),
            used=_b(h.get(b"used"), "0") == "1",
            revoked=_b(h.get(b"revoked"), "0") == "1",
            expires_at=datetime.fromtimestamp(int(_b(h.get(b"expires_at"), "0")), tz=UTC),
        )
