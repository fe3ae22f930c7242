from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol


class RevocationRegistry(Protocol):
    """
    Set of access-token strings that must be rejected before decoding.

    Entries only need to outlive the token itself, so implementations may
    forget them once ``ttl`` (the access-token lifetime) has elapsed.
    Both methods are idempotent and safe under concurrent callers.
    """

    def add(self, token: str) -> None: ...

    def has(self, token: str) -> bool: ...


class InMemoryRevocationRegistry(RevocationRegistry):
    """Process-local registry with lazy expiry of stale entries."""

    def __init__(self, ttl: timedelta) -> None:
        self._ttl = ttl
        self._entries: dict[str, datetime] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def add(self, token: str) -> None:
        if not token:
            return
        with self._lock:
            self._purge()
            self._entries[token] = self._now() + self._ttl

    def has(self, token: str) -> bool:
        if not token:
            return False
        with self._lock:
            forget_at = self._entries.get(token)
            if forget_at is None:
                return False
            if forget_at <= self._now():
                del self._entries[token]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._entries)

    def _purge(self) -> None:
        # caller holds the lock
        now = self._now()
        for token in [t for t, at in self._entries.items() if at <= now]:
            del self._entries[token]
