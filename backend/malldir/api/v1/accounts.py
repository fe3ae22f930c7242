"""Account profile endpoints (owner or admin; listing is admin-only)."""

from __future__ import annotations

from flask import Blueprint, request

from malldir.api.deps import (
    current_identity,
    json_response,
    parse_pagination,
    require_auth,
    require_roles,
    timing,
)
from malldir.core import security
from malldir.models.account import Role
from malldir.schemas import AccountSchema, AccountUpdateSchema, MetaSchema
from malldir.services.accounts import AccountUpdateIn

bp = Blueprint("accounts", __name__)

account_schema = AccountSchema()
accounts_schema = AccountSchema(many=True)
update_schema = AccountUpdateSchema()
meta_schema = MetaSchema()


@bp.get("")
@require_roles(Role.ADMIN)
@timing
def list_accounts():
    """List accounts with pagination (admin only)."""

    params = parse_pagination()
    result = security.build_account_service().list(current_identity(), params)
    return json_response(
        {"data": accounts_schema.dump(result.items), "meta": meta_schema.dump(result.meta)}
    )


@bp.get("/<int:account_id>")
@require_auth
@timing
def get_account(account_id: int):
    """Return one account (owner or admin)."""

    account = security.build_account_service().get(current_identity(), account_id)
    return json_response({"data": account_schema.dump(account)})


@bp.patch("/<int:account_id>")
@require_auth
@timing
def update_account(account_id: int):
    """Edit username/email/password (owner or admin)."""

    service = security.build_account_service()
    # authorize before validating so strangers get 403, not field errors
    service.get(current_identity(), account_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    account = service.update(current_identity(), account_id, AccountUpdateIn(**data))
    return json_response({"data": account_schema.dump(account)})
