# malldir/infra/jwt/pyjwt_codec.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt

from malldir.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
)
from malldir.services._shared.ports import TokenCodec


@dataclass(slots=True)
class PyJWTCodec(TokenCodec):
    """
    Adapter over PyJWT for HMAC-signed tokens.

    :param algorithm: JWS algorithm; only this one is accepted on decode.
    """

    algorithm: str = "HS256"

    def encode(self, claims: dict[str, Any], secret: str) -> str:
        return jwt.encode(claims, secret, algorithm=self.algorithm)

    def peek(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                options={"verify_signature": False},
                algorithms=[self.algorithm],
            )
        except jwt.PyJWTError as exc:
            raise MalformedTokenError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise MalformedTokenError("Token payload is not a JSON object.")
        return payload

    def decode(
        self,
        token: str,
        secret: str,
        *,
        audience: str | None = None,
        issuer: str | None = None,
    ) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=audience,
                issuer=issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError(str(exc)) from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
