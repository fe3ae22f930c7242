from __future__ import annotations

from dataclasses import dataclass

from malldir.services._shared.dto import PageMeta
from malldir.services.credentials.dto import AccountOut


@dataclass(frozen=True, slots=True)
class AccountUpdateIn:
    """
    Partial profile update; ``None`` means "leave unchanged".

    :param username: New username.
    :param email: New email.
    :param password: New raw password.
    """

    username: str | None = None
    email: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class AccountListOut:
    items: list[AccountOut]
    meta: PageMeta
