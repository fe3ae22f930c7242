"""Service layer public API.

Callers import from :mod:`malldir.services` without knowing the internal
structure.

Re-exports
----------
- Base primitives (from ``malldir.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Credentials (from ``malldir.services.credentials``)
    * :class:`CredentialService`
    * DTOs: :class:`RegisterIn`, :class:`CredentialsIn`, :class:`AccountOut`

- Session lifecycle (from ``malldir.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LogoutIn`, :class:`RefreshIn`, :class:`SessionOut`,
      :class:`StatusOut`

- Account profiles (from ``malldir.services.accounts``)
    * :class:`AccountService`
    * DTOs: :class:`AccountUpdateIn`, :class:`AccountListOut`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from ._shared.dto import PageMeta, PaginationIn
from .accounts import AccountListOut, AccountService, AccountUpdateIn
from .auth import AuthService, LogoutIn, RefreshIn, SessionOut, StatusOut
from .credentials import AccountOut, CredentialService, CredentialsIn, RegisterIn

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    "PaginationIn",
    "PageMeta",
    # Credentials
    "CredentialService",
    "RegisterIn",
    "CredentialsIn",
    "AccountOut",
    # Sessions
    "AuthService",
    "LogoutIn",
    "RefreshIn",
    "SessionOut",
    "StatusOut",
    # Accounts
    "AccountService",
    "AccountUpdateIn",
    "AccountListOut",
]
