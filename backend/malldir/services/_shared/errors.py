"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between repositories, token
components and application services.

The translation to HTTP responses (RFC 7807) is handled by
``malldir/core/errors.py`` via ``BaseService.translate_exceptions()``.
Authentication errors form two families (credentials and tokens); every
member of a family is rendered with the same client message, while the
concrete class name is kept for logs.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint to match (e.g. ``uq_accounts_email``).
    :returns: ``True`` if the error message names the constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` subclasses.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Account").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Account").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateIdentityError(ConflictError):
    """Registration collided with an existing email or username."""

    def __init__(self, detail: str) -> None:
        super().__init__("Account", detail)


# --------------------------------------------------------------------------- #
# Authentication: credentials
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base for every failure that ends in a 401."""


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair rejected."""


class AccountNotFoundError(InvalidCredentialsError):
    """No account matches the supplied email."""


class BadCredentialError(InvalidCredentialsError):
    """Account exists but the password does not match."""


class AccountInactiveError(BadCredentialError):
    """Credentials matched an account whose status is ``inactive``."""


# --------------------------------------------------------------------------- #
# Authentication: bearer tokens
# --------------------------------------------------------------------------- #


class TokenError(AuthenticationError):
    """Base for access/refresh token rejections."""


class MissingTokenError(TokenError):
    """No bearer credential was presented."""


class BlocklistedTokenError(TokenError):
    """Token is present in the revocation registry."""


class MalformedTokenError(TokenError):
    """Token could not be parsed into a claims payload."""


class AudienceMismatchError(TokenError):
    """Declared audience differs from the expected one."""


class ExpiredTokenError(TokenError):
    """Token signature is valid but ``exp`` has passed."""


class InvalidTokenError(TokenError):
    """Signature, issuer, or identity claims failed verification."""


class RefreshTokenReuseError(InvalidTokenError):
    """An already-rotated refresh token was presented again."""


# --------------------------------------------------------------------------- #
# Authorization
# --------------------------------------------------------------------------- #


class AuthorizationError(ServiceError):
    """Verified identity is not allowed to perform the operation."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)
