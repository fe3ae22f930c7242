"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from malldir.api.deps import json_response, timing
from malldir.core import security
from malldir.core.extensions import limiter
from malldir.schemas import (
    LoginSchema,
    RegisterSchema,
    SessionResponseSchema,
    StatusResponseSchema,
)
from malldir.services.auth import LogoutIn, RefreshIn
from malldir.services.credentials import CredentialsIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
session_schema = SessionResponseSchema()
status_schema = StatusResponseSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _session_response(message: str, session, *, status: int = 200, include_user: bool = True):
    body = {"message": message, "access_token": session.access_token}
    if include_user:
        body["user"] = session.account
    response = json_response(session_schema.dump(body), status=status)
    return security.set_refresh_cookie(response, session.refresh_token)


@bp.post("/register")
@timing
def register():
    """Create an account and sign it in (access token + refresh cookie)."""

    data = register_schema.load(request.get_json(silent=True) or {})
    service = security.build_auth_service()
    session = service.register(RegisterIn(**data))
    return _session_response("User registered successfully", session, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access token and refresh cookie."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = security.build_auth_service()
    session = service.login(CredentialsIn(**data))
    return _session_response("Login successful", session)


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented access token and clear the refresh cookie.

    ``?all=true`` also revokes every refresh session of the caller.
    """

    all_sessions = request.args.get("all", "").strip().lower() in {"1", "true", "yes"}
    service = security.build_auth_service()
    service.logout(
        LogoutIn(authorization=request.headers.get("Authorization"), all_sessions=all_sessions)
    )
    response = json_response({"message": "Logged out successfully"})
    return security.clear_refresh_cookie(response)


@bp.get("/status")
@timing
def status():
    """Report whether the caller holds a valid access token. Always 200."""

    service = security.build_auth_service()
    result = service.status(request.headers.get("Authorization"))
    body = {
        "status": result.authenticated,
        "message": "Authenticated" if result.authenticated else "Not authenticated",
        "user": result.account,
    }
    return json_response(status_schema.dump(body))


@bp.post("/refresh")
@timing
def refresh():
    """Exchange the refresh cookie for a new access token and rotated cookie."""

    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    service = security.build_auth_service()
    session = service.refresh(RefreshIn(refresh_token=token))
    return _session_response("Token refreshed", session, include_user=False)
