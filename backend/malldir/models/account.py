"""Account model: the registered identity behind every session."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from malldir.core.extensions import bcrypt, db

from .base import PKMixin, ReprMixin, TimestampMixin


class Role(str, Enum):
    """Authorization roles carried in access tokens."""

    USER = "user"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    """Lifecycle flag; inactive accounts cannot log in or refresh."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Account(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered identity of the mall directory.

    Fields
    ------
    username : str
        Public handle. Unique, compared exactly (after trimming).
    email : str
        Login email. Stored lower-cased, so uniqueness is case-insensitive.
    password_hash : str
        bcrypt hash (write-only setter via ``password``).
    role : str
        ``user`` (default) or ``admin``. Only changed out-of-band.
    status : str
        ``active`` (default) or ``inactive``.
    last_login_at : datetime | None
        Stamped on every successful login.
    """

    __tablename__ = "accounts"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.USER.value)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AccountStatus.ACTIVE.value
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_accounts_email"),
        UniqueConstraint("username", name="uq_accounts_username"),
        Index("ix_accounts_email", "email"),
        Index("ix_accounts_username", "username"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        The hash is computed here, synchronously, so it is in place before
        any flush. Assigning other attributes never touches it.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = bcrypt.generate_password_hash(raw).decode("utf-8")

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash in constant time.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        """
        if not self.password_hash or not isinstance(raw, str):
            return False
        return bool(bcrypt.check_password_hash(self.password_hash, raw))

    # -------------------- Convenience --------------------
    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()

    @validates("role")
    def _validate_role(self, key: str, value: str | Role) -> str:
        try:
            return Role(value).value
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None

    @validates("status")
    def _validate_status(self, key: str, value: str | AccountStatus) -> str:
        try:
            return AccountStatus(value).value
        except ValueError:
            raise ValueError(f"Unknown status: {value!r}") from None
