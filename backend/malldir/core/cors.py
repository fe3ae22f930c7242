"""CORS configuration for the API.

The refresh token travels in a cookie, so browsers only send it when the
response allows credentials, which in turn forbids a wildcard origin.
"""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value, dropping blanks and ``*``."""
    return [o.strip() for o in (raw or "").split(",") if o.strip() and o.strip() != "*"]


def init_app(app: Flask) -> None:
    """Allow the configured front-end origins to call ``/api/*`` with cookies.

    With no explicit origin configured, cross-origin calls are refused and
    only same-origin clients can use the refresh cookie.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=bool(origins),
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
