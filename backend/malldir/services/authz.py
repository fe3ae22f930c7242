"""
Authorization guard.

Pure functions over a :class:`VerifiedIdentity`. Every denial raises the
same :class:`AuthorizationError`, so callers learn nothing about *why*
(e.g. who owns the resource).
"""

from __future__ import annotations

from collections.abc import Iterable

from malldir.models.account import Role
from malldir.services._shared.errors import AuthorizationError
from malldir.services._shared.policies.common import is_owner
from malldir.services.tokens.dto import VerifiedIdentity


def require_role(identity: VerifiedIdentity | None, allowed_roles: Iterable[Role | str]) -> None:
    """
    Allow when ``identity`` holds one of ``allowed_roles``.

    :raises AuthorizationError: If there is no identity or its role is not allowed.
    """
    allowed = {Role(r) for r in allowed_roles}
    if identity is None or identity.role not in allowed:
        raise AuthorizationError()


def require_owner_or_admin(identity: VerifiedIdentity | None, owner_id: int | str | None) -> None:
    """
    Allow when ``identity`` owns the resource or is an admin.

    :raises AuthorizationError: Otherwise.
    """
    if identity is None:
        raise AuthorizationError()
    if identity.role is Role.ADMIN:
        return
    if owner_id is None or not is_owner(actor_id=identity.id, owner_id=owner_id):
        raise AuthorizationError()


def require_admin(identity: VerifiedIdentity | None) -> None:
    """Shorthand for admin-only operations (no owner exception)."""
    require_role(identity, (Role.ADMIN,))
