"""
AccountService
==============

Profile read/edit for accounts, gated by the authorization guard:

- ``get`` / ``update``: owner or admin.
- ``list``: admin only.

Role and status are never editable here.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from malldir.repositories.account import AccountRepository
from malldir.repositories.base import Pagination
from malldir.services import authz
from malldir.services._shared.base import BaseService
from malldir.services._shared.dto import PageMeta, PaginationIn
from malldir.services._shared.errors import DuplicateIdentityError, NotFoundError
from malldir.services.accounts.dto import AccountListOut, AccountUpdateIn
from malldir.services.credentials.dto import AccountOut
from malldir.services.credentials.service import (
    EMAIL_TAKEN,
    USERNAME_TAKEN,
    duplicate_from_integrity,
)
from malldir.services.tokens.dto import VerifiedIdentity

log = logging.getLogger(__name__)


class AccountService(BaseService):
    """Application service for account profiles."""

    def get(self, identity: VerifiedIdentity | None, account_id: int) -> AccountOut:
        """
        :raises AuthorizationError: Caller is neither the owner nor an admin.
        :raises NotFoundError: No such account.
        """
        authz.require_owner_or_admin(identity, account_id)
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            return AccountOut.from_model(account)

    def list(self, identity: VerifiedIdentity | None, params: PaginationIn) -> AccountListOut:
        """
        :raises AuthorizationError: Caller is not an admin.
        """
        authz.require_admin(identity)
        with self.ro_uow() as uow:
            page = uow.accounts.paginate(
                Pagination(page=params.page, limit=params.limit, sort=list(params.sort or []))
            )
            items = [AccountOut.from_model(a) for a in page.items]
        return AccountListOut(
            items=items,
            meta=PageMeta.build(page=page.page, limit=page.limit, total=page.total),
        )

    def update(
        self, identity: VerifiedIdentity | None, account_id: int, dto: AccountUpdateIn
    ) -> AccountOut:
        """
        Apply a partial profile update. A new ``password`` is re-hashed by
        the model; unrelated edits leave the hash untouched.

        :raises AuthorizationError: Caller is neither the owner nor an admin.
        :raises NotFoundError: No such account.
        :raises DuplicateIdentityError: New email or username is taken.
        """
        authz.require_owner_or_admin(identity, account_id)
        fields: dict[str, Any] = {
            k: v
            for k, v in (
                ("username", dto.username),
                ("email", dto.email),
                ("password", dto.password),
            )
            if v is not None
        }

        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)

            if "email" in fields and repo.exists_by_email(fields["email"], exclude_id=account_id):
                raise DuplicateIdentityError(EMAIL_TAKEN)
            if "username" in fields and repo.exists_by_username(
                fields["username"], exclude_id=account_id
            ):
                raise DuplicateIdentityError(USERNAME_TAKEN)

            try:
                repo.update(account, **fields)
            except IntegrityError as exc:
                duplicate = duplicate_from_integrity(exc)
                if duplicate is None:
                    raise
                raise duplicate from exc
            out = AccountOut.from_model(account)

        if identity is not None and identity.id != account_id:
            log.info(
                "Admin updated account %s (fields=%s)",
                account_id,
                sorted(fields),
                extra={"account_id": identity.id},
            )
        return out
