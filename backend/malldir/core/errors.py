"""RFC 7807 ``application/problem+json`` error responses for the API.

Clients only ever see a family message (credentials, token, forbidden);
the concrete failure kind goes to the log.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from malldir.core.logger import ensure_request_id

log = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
INVALID_TOKEN_MESSAGE = "Invalid or expired token. Please log in again."
FORBIDDEN_MESSAGE = "Forbidden"
SERVER_ERROR_MESSAGE = "Unexpected error"


def status_code_name(status: int) -> str:
    """``404`` -> ``"not_found"``; unknown statuses map to ``"error"``."""
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def problem_body(
    status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build the problem document returned for every error.

    ``detail`` and ``message`` carry the same client-safe text; ``request_id``
    matches the ``X-Request-ID`` response header.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "code": code,
        "detail": message,
        "message": message,
        "instance": request.path if request else None,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def _respond(body: dict[str, Any]) -> tuple[Response, int]:
    resp = jsonify(body)
    resp.mimetype = "application/problem+json"
    return resp, body["status"]


class APIError(Exception):
    """
    Error raised by the HTTP layer and rendered as a problem document.

    :param message: Client-safe description.
    :param status_code: HTTP status, 400 unless given.
    :param code: Stable machine-readable code.
    :param details: Optional structured, client-safe payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = HTTPStatus.BAD_REQUEST,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem_body(self.status_code, self.code, self.message, self.details or None)


class NotFound(APIError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, HTTPStatus.NOT_FOUND, "not_found")


class Conflict(APIError):
    """Duplicate email or username."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, HTTPStatus.CONFLICT, "conflict")


class Unauthorized(APIError):
    """Any credential or token failure; the message names only the family."""

    def __init__(self, message: str = INVALID_TOKEN_MESSAGE) -> None:
        super().__init__(message, HTTPStatus.UNAUTHORIZED, "unauthorized")


class Forbidden(APIError):
    def __init__(self, message: str = FORBIDDEN_MESSAGE) -> None:
        super().__init__(message, HTTPStatus.FORBIDDEN, "forbidden")


def init_app(app: Flask) -> None:
    """
    Register the problem+json handlers on ``app``.

    Service errors go through
    :meth:`malldir.services._shared.base.BaseService.translate_exceptions`.
    4xx are logged as warnings; 5xx (database or Redis failures included)
    are logged with ``exc_info`` and answered with a generic 500.
    """
    from malldir.services._shared.base import BaseService
    from malldir.services._shared.errors import ServiceError

    translator = BaseService()

    def server_error(label: str, err: Exception):
        body = problem_body(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", SERVER_ERROR_MESSAGE
        )
        log.error(
            "%s: kind=%s request_id=%s",
            label,
            type(err).__name__,
            body["request_id"],
            exc_info=err,
        )
        return _respond(body)

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_problem()
        log.log(
            logging.ERROR if err.status_code >= 500 else logging.WARNING,
            "APIError: code=%s status=%s request_id=%s",
            err.code,
            err.status_code,
            body["request_id"],
        )
        return _respond(body)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = translator.translate_exceptions(err)
        if not isinstance(translated, APIError):  # pragma: no cover - every ServiceError maps
            return server_error("ServiceError", err)
        body = translated.to_problem()
        log.warning(
            "ServiceError: kind=%s status=%s request_id=%s",
            type(err).__name__,
            translated.status_code,
            body["request_id"],
            extra={"kind": type(err).__name__},
        )
        return _respond(body)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
        code = status_code_name(status)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        body = problem_body(status, code, message)
        log.log(
            logging.ERROR if status >= 500 else logging.WARNING,
            "HTTPException: code=%s status=%s request_id=%s",
            code,
            status,
            body["request_id"],
        )
        return _respond(body)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        body = problem_body(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.normalized_messages()},
        )
        log.warning("ValidationError: fields=%s", sorted(err.normalized_messages()))
        return _respond(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # unique constraints raced past the service-level duplicate check
        body = problem_body(HTTPStatus.CONFLICT, "conflict", "Resource conflict")
        log.warning("IntegrityError: request_id=%s", body["request_id"], exc_info=err)
        return _respond(body)

    @app.errorhandler(OperationalError)
    @app.errorhandler(RedisError)
    def handle_dependency_error(err: Exception):
        return server_error("DependencyFailure", err)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return server_error("Unhandled exception", err)
