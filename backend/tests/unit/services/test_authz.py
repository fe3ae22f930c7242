"""Authorization guard matrix."""

from __future__ import annotations

import pytest
from malldir.models.account import Role
from malldir.services import authz
from malldir.services._shared.errors import AuthorizationError
from malldir.services.tokens import VerifiedIdentity

USER = VerifiedIdentity(id=1, username="u", role=Role.USER)
ADMIN = VerifiedIdentity(id=2, username="a", role=Role.ADMIN)


@pytest.mark.parametrize(
    ("identity", "owner_id", "allowed"),
    [
        (USER, 1, True),  # owner
        (USER, 99, False),  # stranger
        (ADMIN, 2, True),  # admin on own resource
        (ADMIN, 99, True),  # admin on someone else's
    ],
)
def test_owner_or_admin_matrix(identity, owner_id, allowed):
    if allowed:
        authz.require_owner_or_admin(identity, owner_id)
    else:
        with pytest.raises(AuthorizationError):
            authz.require_owner_or_admin(identity, owner_id)


def test_owner_compares_ids_across_types():
    authz.require_owner_or_admin(USER, "1")


def test_no_identity_is_denied():
    with pytest.raises(AuthorizationError):
        authz.require_owner_or_admin(None, 1)
    with pytest.raises(AuthorizationError):
        authz.require_role(None, [Role.USER])


def test_require_role():
    authz.require_role(USER, [Role.USER, Role.ADMIN])
    authz.require_role(ADMIN, ["admin"])
    with pytest.raises(AuthorizationError):
        authz.require_role(USER, [Role.ADMIN])


def test_require_admin():
    authz.require_admin(ADMIN)
    with pytest.raises(AuthorizationError):
        authz.require_admin(USER)


def test_denials_carry_no_detail():
    with pytest.raises(AuthorizationError) as a:
        authz.require_admin(USER)
    with pytest.raises(AuthorizationError) as b:
        authz.require_owner_or_admin(USER, 99)
    assert str(a.value) == str(b.value) == "Forbidden"
