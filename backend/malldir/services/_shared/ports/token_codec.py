from __future__ import annotations

from typing import Any, Protocol


class TokenCodec(Protocol):
    """Port for signing and reading compact JWS tokens."""

    def encode(self, claims: dict[str, Any], secret: str) -> str: ...

    def peek(self, token: str) -> dict[str, Any]:
        """
        Return the claims without verifying the signature.

        :raises MalformedTokenError: If the token cannot be parsed.
        """

    def decode(
        self,
        token: str,
        secret: str,
        *,
        audience: str | None = None,
        issuer: str | None = None,
    ) -> dict[str, Any]:
        """
        Verify signature and time claims and return the payload.

        :raises ExpiredTokenError: If ``exp`` has passed but the signature is valid.
        :raises InvalidTokenError: For any other verification failure.
        """
