# malldir/services/tokens/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from malldir.models.account import Role

REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission and verification settings.

    :param access_secret: HMAC key for access tokens.
    :param refresh_secret: HMAC key for refresh tokens.
    :param issuer: ``iss`` stamped into and required from access tokens.
    :param audience: ``aud`` stamped into and required from access tokens.
    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    :param algorithm: JWS algorithm.
    """

    access_secret: str
    refresh_secret: str
    issuer: str
    audience: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenConfig:
        """Build from a Flask ``app.config``-like mapping."""
        return cls(
            access_secret=config["JWT_SECRET_KEY"],
            refresh_secret=config["JWT_REFRESH_SECRET_KEY"],
            issuer=config["JWT_ISSUER"],
            audience=config["JWT_AUDIENCE"],
            access_expires=timedelta(minutes=int(config["JWT_ACCESS_TOKEN_EXPIRES"])),
            refresh_expires=timedelta(days=int(config["JWT_REFRESH_TOKEN_EXPIRES"])),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Identity claims embedded in an access token.

    :param id: Account id (sent as the ``sub`` claim).
    :param username: Public username.
    :param role: Account role.
    """

    id: int
    username: str
    role: Role


@dataclass(frozen=True, slots=True)
class VerifiedIdentity:
    """
    Request-scoped identity produced by a successful verification.

    Only ever built from a signature-checked token, never from client fields.
    """

    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """Verified content of a refresh token."""

    account_id: int
    jti: str
