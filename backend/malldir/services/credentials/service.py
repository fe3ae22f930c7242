"""
CredentialService
=================

Owns hashed-password storage and verification for accounts:

- Register accounts, enforcing unique email (case-insensitive) and username.
- Verify email/password pairs in constant time.
- Stamp ``last_login_at`` after a successful login.

No tokens are issued here.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from malldir.core.extensions import bcrypt
from malldir.repositories.account import AccountRepository
from malldir.services._shared.base import BaseService
from malldir.services._shared.errors import (
    AccountInactiveError,
    AccountNotFoundError,
    BadCredentialError,
    DuplicateIdentityError,
    NotFoundError,
    violates,
)
from malldir.services.credentials.dto import AccountOut, CredentialsIn, RegisterIn

log = logging.getLogger(__name__)

EMAIL_TAKEN = "email already in use"
USERNAME_TAKEN = "username already in use"


def duplicate_from_integrity(exc: IntegrityError) -> DuplicateIdentityError | None:
    # PostgreSQL names the constraint, SQLite names the column
    if violates(exc, "uq_accounts_email") or violates(exc, "accounts.email"):
        return DuplicateIdentityError(EMAIL_TAKEN)
    if violates(exc, "uq_accounts_username") or violates(exc, "accounts.username"):
        return DuplicateIdentityError(USERNAME_TAKEN)
    return None


class CredentialService(BaseService):
    """Application service for account credentials."""

    _dummy_hash: str | None = None

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> AccountOut:
        """
        Create an account with role ``user`` and status ``active``.

        :param dto: Registration input.
        :returns: Public-safe account DTO.
        :raises DuplicateIdentityError: If the email or username is taken.
        """
        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts

            if repo.exists_by_email(dto.email):
                raise DuplicateIdentityError(EMAIL_TAKEN)
            if repo.exists_by_username(dto.username):
                raise DuplicateIdentityError(USERNAME_TAKEN)

            try:
                account = repo.model(
                    username=dto.username,
                    email=dto.email,
                    password=dto.password,  # model hashes via setter
                )
                repo.add(account)
            except IntegrityError as exc:
                duplicate = duplicate_from_integrity(exc)
                if duplicate is None:
                    raise
                raise duplicate from exc

            out = AccountOut.from_model(account)

        log.info("Account registered", extra={"account_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Verification
    # --------------------------------------------------------------------- #

    def verify(self, dto: CredentialsIn) -> AccountOut:
        """
        Check an email/password pair.

        A bcrypt comparison runs even when the email is unknown, so both
        failure paths cost the same.

        :param dto: Credentials input.
        :returns: The matching account.
        :raises AccountNotFoundError: No account has this email.
        :raises BadCredentialError: The password does not match.
        :raises AccountInactiveError: The account is inactive.
        """
        with self.ro_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get_by_email(dto.email)

            if account is None:
                bcrypt.check_password_hash(self._timing_hash(), dto.password)
                raise AccountNotFoundError("No account for the supplied email.")
            if not account.verify_password(dto.password):
                raise BadCredentialError("Password mismatch.")
            if not account.is_active:
                raise AccountInactiveError("Account is inactive.")

            return AccountOut.from_model(account)

    def mark_logged_in(self, account_id: int) -> AccountOut:
        """
        Stamp ``last_login_at`` with the current UTC time.

        :raises NotFoundError: If the account vanished in between.
        """
        with self.rw_uow() as uow:
            repo: AccountRepository = uow.accounts
            account = repo.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            account.last_login_at = self.now_utc()
            repo.flush()
            return AccountOut.from_model(account)

    def load_active(self, account_id: int) -> AccountOut | None:
        """Return the account when it exists and is active, else ``None``."""
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None or not account.is_active:
                return None
            return AccountOut.from_model(account)

    @classmethod
    def _timing_hash(cls) -> str:
        if cls._dummy_hash is None:
            cls._dummy_hash = bcrypt.generate_password_hash("timing-equaliser").decode("utf-8")
        return cls._dummy_hash
