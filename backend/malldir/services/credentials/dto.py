"""
DTOs for CredentialService.

They keep the ORM model out of callers: everything that leaves the
service is a frozen dataclass without the password hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from malldir.models.account import Account, Role


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Public username.
    :param email: Login email (normalized to lowercase by the model).
    :param password: Raw password to be hashed by the model.
    """

    username: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class CredentialsIn:
    """
    Input DTO for credential verification.

    :param email: Login email (any casing).
    :param password: Raw password.
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class AccountOut:
    """
    Public-safe account representation.

    :param id: Account identifier.
    :param username: Public username.
    :param email: Login email.
    :param role: ``user`` or ``admin``.
    :param status: ``active`` or ``inactive``.
    :param last_login_at: Last successful login (UTC), if any.
    :param created_at: Creation timestamp (UTC).
    """

    id: int
    username: str
    email: str
    role: Role
    status: str
    last_login_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, account: Account) -> AccountOut:
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=Role(account.role),
            status=account.status,
            last_login_at=account.last_login_at,
            created_at=account.created_at,
        )
