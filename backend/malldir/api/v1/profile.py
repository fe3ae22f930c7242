"""Profile of the authenticated caller."""

from __future__ import annotations

from flask import Blueprint

from malldir.api.deps import current_identity, json_response, require_auth, timing
from malldir.services._shared.errors import MissingTokenError

bp = Blueprint("profile", __name__)


@bp.get("")
@require_auth
@timing
def profile():
    """Return the verified token identity; no database round-trip."""

    identity = current_identity()
    if identity is None:
        raise MissingTokenError("No verified identity on the request.")
    return json_response(
        {
            "message": "Welcome to your profile",
            "user": {"id": identity.id, "username": identity.username, "role": identity.role.value},
        }
    )
