"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from malldir.core import security
from malldir.models.account import Role
from malldir.schemas.common import PaginationQuerySchema
from malldir.services import authz
from malldir.services._shared.dto import PaginationIn
from malldir.services.tokens import VerifiedIdentity

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> PaginationIn:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load(request.args)
    return PaginationIn(page=data["page"], limit=data["limit"], sort=data["sort"])


def current_identity() -> VerifiedIdentity | None:
    """Return the identity verified for this request, if any."""

    return cast(VerifiedIdentity | None, g.get("identity"))


def require_auth(func: F) -> F:
    """Verify the bearer access token and expose it as ``g.identity``.

    Token errors propagate to the error handlers, which answer with a uniform 401.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.pop("identity", None)
        verifier = security.build_verifier()
        g.identity = verifier.verify(request.headers.get("Authorization"))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*roles: Role | str) -> Callable[[F], F]:
    """Like :func:`require_auth`, then deny (403) unless the role is allowed.

    Requests that pass an admin-only gate are written to the audit log.
    """

    admin_only = {Role(r) for r in roles} == {Role.ADMIN}

    def decorator(func: F) -> F:
        @require_auth
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            identity = current_identity()
            authz.require_role(identity, roles)
            if admin_only:
                log.info(
                    "Admin action %s %s",
                    request.method,
                    request.path,
                    extra={"account_id": identity.id if identity else None},
                )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
