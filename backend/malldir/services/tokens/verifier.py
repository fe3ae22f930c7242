# malldir/services/tokens/verifier.py
"""
Access-token verification.

The checks run in a fixed order and each one short-circuits:

1. bearer extraction                 -> ``MissingTokenError``
2. revocation registry membership    -> ``BlocklistedTokenError``
3. unverified structural decode      -> ``MalformedTokenError``
4. declared audience                 -> ``AudienceMismatchError``
5. signature, ``exp``, ``iss``, ``aud`` -> ``ExpiredTokenError`` / ``InvalidTokenError``
6. identity claims                   -> ``InvalidTokenError``

The registry is consulted before any decoding so a revoked token is
rejected even while its signature is still valid. An expired token is added
to the registry so a replay takes the cheaper step 2 next time.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from malldir.models.account import Role
from malldir.services._shared.errors import (
    AudienceMismatchError,
    BlocklistedTokenError,
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    MissingTokenError,
)
from malldir.services._shared.ports import RevocationRegistry, TokenCodec
from malldir.services.tokens.dto import (
    REFRESH_TOKEN_TYPE,
    RefreshClaims,
    TokenConfig,
    VerifiedIdentity,
)

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer(raw_header: str | None) -> str:
    """
    Return the token of an ``Authorization: Bearer <token>`` header value.

    :raises MissingTokenError: If the header is absent, uses another scheme,
        or carries an empty token.
    """
    if not raw_header or not raw_header.startswith(BEARER_PREFIX):
        raise MissingTokenError("Authorization header missing or not a bearer credential.")
    token = raw_header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise MissingTokenError("Empty bearer token.")
    return token


def _audience_matches(declared: Any, expected: str) -> bool:
    if isinstance(declared, str):
        return declared == expected
    if isinstance(declared, list):
        return expected in declared
    return False


def _parse_subject(sub: Any) -> int:
    # isdigit() alone also admits superscript and other non-ASCII digits
    if isinstance(sub, str) and sub.isascii() and sub.isdigit():
        return int(sub)
    raise InvalidTokenError("Token subject is not an account id.")


class TokenVerifier:
    """Validate presented tokens and map them to a :class:`VerifiedIdentity`."""

    def __init__(
        self,
        *,
        config: TokenConfig,
        codec: TokenCodec,
        registry: RevocationRegistry,
    ) -> None:
        self.cfg = config
        self.codec = codec
        self.registry = registry

    def verify(self, raw_header: str | None) -> VerifiedIdentity:
        """
        Verify the access token carried by an ``Authorization`` header value.

        :param raw_header: Header value as received (may be ``None``).
        :returns: Identity built from the verified claims.
        :raises TokenError: One subclass per failed step (see module docs).
        """
        token = extract_bearer(raw_header)
        return self.verify_token(token)

    def verify_token(self, token: str) -> VerifiedIdentity:
        """Run steps 2-6 on an already extracted token."""
        if self.registry.has(token):
            raise BlocklistedTokenError("Token has been revoked.")

        unverified = self.codec.peek(token)
        if not unverified:
            raise MalformedTokenError("Token payload is empty.")

        if not _audience_matches(unverified.get("aud"), self.cfg.audience):
            raise AudienceMismatchError("Token audience does not match.")

        try:
            claims = self.codec.decode(
                token,
                self.cfg.access_secret,
                audience=self.cfg.audience,
                issuer=self.cfg.issuer,
            )
        except ExpiredTokenError:
            self.registry.add(token)
            log.info("Expired access token added to the revocation registry.")
            raise

        return self._to_identity(claims)

    @staticmethod
    def _to_identity(claims: Mapping[str, Any]) -> VerifiedIdentity:
        account_id = _parse_subject(claims.get("sub"))
        username = claims.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError("Token carries no username.")
        try:
            role = Role(claims.get("role"))
        except ValueError:
            raise InvalidTokenError("Token carries an unknown role.") from None
        return VerifiedIdentity(id=account_id, username=username, role=role)

    # ------------------------------------------------------------------ #
    # Refresh tokens
    # ------------------------------------------------------------------ #

    def decode_refresh(self, token: str | None) -> RefreshClaims:
        """
        Verify a refresh token's signature and expiry.

        Server-side session state (rotation, revocation) is checked by the
        caller through the refresh session store.

        :raises MissingTokenError: If no token was presented.
        :raises ExpiredTokenError: If the token has expired.
        :raises InvalidTokenError: For any other failure.
        """
        if not token:
            raise MissingTokenError("Refresh token missing.")
        claims = self.codec.decode(token, self.cfg.refresh_secret)
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidTokenError("Wrong token type: refresh token required.")
        jti = claims.get("jti")
        if not isinstance(jti, str) or not jti:
            raise InvalidTokenError("Refresh token carries no jti.")
        return RefreshClaims(account_id=_parse_subject(claims.get("sub")), jti=jti)
