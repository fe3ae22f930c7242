from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum, auto
from typing import Protocol
from uuid import uuid4


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()
    REUSED = auto()


@dataclass(frozen=True)
class RefreshSessionView:
    """
    Read-model for a refresh session.

    :ivar jti: Refresh token identifier.
    :ivar account_id: Owner account id.
    :ivar used: Whether the token has been consumed by a rotation.
    :ivar revoked: Whether the session was explicitly revoked.
    :ivar expires_at: Absolute expiration (UTC).
    """

    jti: str
    account_id: int
    used: bool
    revoked: bool
    expires_at: datetime


class RefreshSessionStore(Protocol):
    """
    Server-side record of issued refresh tokens.

    A session is registered *before* its token is handed to the client and
    ``rotate`` MUST consume the old session and create the new one atomically,
    so a refresh token can be exchanged at most once.
    """

    def new_jti(self) -> str:
        """Generate a new random refresh token identifier."""
        return uuid4().hex

    def register(
        self, *, jti: str, account_id: int, expires_at: datetime, issued_at: datetime
    ) -> None: ...

    def rotate(
        self, *, old_jti: str, new_jti: str, now: datetime, new_expires_at: datetime
    ) -> RotationResult: ...

    def mark_revoked(self, jti: str) -> bool:
        """Mark a single session as revoked. :returns: True if it existed."""

    def revoke_all_for_account(self, account_id: int) -> int:
        """:returns: Number of sessions affected."""

    def get(self, jti: str) -> RefreshSessionView | None: ...


@dataclass(frozen=True)
class _Session:
    account_id: int
    issued_at: datetime
    expires_at: datetime
    used: bool = False
    revoked: bool = False


class InMemoryRefreshSessionStore(RefreshSessionStore):
    """
    Process-local refresh session store.

    .. note::
       A single lock serialises every mutation, which makes ``rotate`` atomic.
       Expired sessions are purged lazily on ``register`` and ``rotate``;
       used sessions stay until they expire so reuse is still detected.
    """

    def __init__(self) -> None:
        self._by_jti: dict[str, _Session] = {}
        self._by_account: dict[int, set[str]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def new_jti(self) -> str:
        return uuid4().hex

    def register(
        self, *, jti: str, account_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        with self._lock:
            self._purge()
            self._by_jti[jti] = _Session(
                account_id=account_id, issued_at=issued_at, expires_at=expires_at
            )
            self._by_account.setdefault(account_id, set()).add(jti)

    def rotate(
        self, *, old_jti: str, new_jti: str, now: datetime, new_expires_at: datetime
    ) -> RotationResult:
        with self._lock:
            self._purge()
            s = self._by_jti.get(old_jti)
            if not s:
                return RotationResult.NOT_FOUND
            if s.expires_at <= now:
                return RotationResult.EXPIRED
            if s.revoked:
                return RotationResult.REVOKED
            if s.used:
                return RotationResult.REUSED

            self._by_jti[old_jti] = replace(s, used=True)
            self._by_jti[new_jti] = _Session(
                account_id=s.account_id, issued_at=now, expires_at=new_expires_at
            )
            self._by_account.setdefault(s.account_id, set()).add(new_jti)
            return RotationResult.OK

    def mark_revoked(self, jti: str) -> bool:
        with self._lock:
            s = self._by_jti.get(jti)
            if not s:
                return False
            self._by_jti[jti] = replace(s, revoked=True)
            return True

    def revoke_all_for_account(self, account_id: int) -> int:
        with self._lock:
            jtis = self._by_account.pop(account_id, set())
            for j in jtis:
                s = self._by_jti.get(j)
                if s is not None:
                    self._by_jti[j] = replace(s, revoked=True)
            return len(jtis)

    def get(self, jti: str) -> RefreshSessionView | None:
        with self._lock:
            s = self._by_jti.get(jti)
        if not s:
            return None
        return RefreshSessionView(
            jti=jti,
            account_id=s.account_id,
            used=s.used,
            revoked=s.revoked,
            expires_at=s.expires_at.astimezone(UTC),
        )

    def __len__(self) -> int:
        with self._lock:
            self._purge()
            return len(self._by_jti)

    def _purge(self) -> None:
        # caller holds the lock
        now = self._now()
        for jti in [j for j, s in self._by_jti.items() if s.expires_at <= now]:
            account_id = self._by_jti.pop(jti).account_id
            jtis = self._by_account.get(account_id)
            if jtis is not None:
                jtis.discard(jti)
                if not jtis:
                    del self._by_account[account_id]
