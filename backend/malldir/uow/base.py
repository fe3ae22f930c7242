"""Transaction boundary the account services run in."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from malldir.repositories.account import AccountRepository


class AccountsUnitOfWork(Protocol):
    """
    One use-case transaction over the ``accounts`` repository.

    Leaving the ``with`` block commits on success and rolls back when it
    raises. Read-only implementations refuse ``commit`` and block writes.
    """

    accounts: AccountRepository

    def __enter__(self) -> AccountsUnitOfWork: ...

    def __exit__(self, exc_type, exc, tb) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
