"""Account repository: lookups and whitelisted updates."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from malldir.models.account import Account
from malldir.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It never issues or checks tokens; that lives in the token services.
    """

    model = Account

    def _sortable_fields(self):
        return {
            "id": Account.id,
            "email": Account.email,
            "username": Account.username,
            "created_at": Account.created_at,
            "last_login_at": Account.last_login_at,
        }

    def _updatable_fields(self):
        """Self-service fields; ``password`` goes through the hashing setter."""
        return {"email", "username", "password"}

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: Account or ``None`` when not found.
        """
        stmt = select(Account).where(Account.email == email.lower().strip())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(Account.id).where(Account.email == email.lower().strip())
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(Account.id).where(Account.username == username.strip())
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)
        return bool(self.session.execute(stmt).first())
