# malldir/services/tokens/issuer.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from malldir.services._shared.ports import RefreshSessionStore, TokenCodec
from malldir.services.tokens.dto import REFRESH_TOKEN_TYPE, AccessClaims, TokenConfig

log = logging.getLogger(__name__)


class TokenIssuer:
    """
    Mint signed access and refresh tokens.

    Access tokens carry ``sub``/``username``/``role`` plus ``iss``/``aud``
    taken from configuration; registered claims are written last so caller
    data can never override them. Refresh tokens carry only ``sub``, ``jti``
    and ``type`` and are signed with a separate secret.
    """

    def __init__(
        self,
        *,
        config: TokenConfig,
        codec: TokenCodec,
        refresh_store: RefreshSessionStore,
    ) -> None:
        self.cfg = config
        self.codec = codec
        self.refresh_store = refresh_store

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # ------------------------------------------------------------------ #
    # Access tokens
    # ------------------------------------------------------------------ #

    def issue_access_token(self, claims: AccessClaims) -> str:
        """
        Issue a short-lived access token.

        :param claims: Identity claims for the account.
        :returns: Compact JWS string.
        """
        now = self.now_utc()
        payload: dict[str, Any] = {
            "username": claims.username,
            "role": claims.role.value,
        }
        payload.update(
            {
                "sub": str(claims.id),
                "jti": uuid4().hex,
                "iss": self.cfg.issuer,
                "aud": self.cfg.audience,
                "iat": int(now.timestamp()),
                "exp": int((now + self.cfg.access_expires).timestamp()),
            }
        )
        return self.codec.encode(payload, self.cfg.access_secret)

    # ------------------------------------------------------------------ #
    # Refresh tokens
    # ------------------------------------------------------------------ #

    def issue_refresh_token(self, subject_id: int) -> str:
        """
        Register a new refresh session, then sign its token.

        The session exists server-side before the token leaves this method.

        :param subject_id: Account id.
        :returns: Compact JWS string.
        """
        now = self.now_utc()
        jti = self.refresh_store.new_jti()
        expires_at = now + self.cfg.refresh_expires
        self.refresh_store.register(
            jti=jti, account_id=subject_id, issued_at=now, expires_at=expires_at
        )
        return self.sign_refresh_token(subject_id, jti=jti, issued_at=now, expires_at=expires_at)

    def sign_refresh_token(
        self, subject_id: int, *, jti: str, issued_at: datetime, expires_at: datetime
    ) -> str:
        """Sign a refresh token for a session that is already registered."""
        payload = {
            "sub": str(subject_id),
            "jti": jti,
            "type": REFRESH_TOKEN_TYPE,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return self.codec.encode(payload, self.cfg.refresh_secret)
