"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from malldir.api.deps import json_response, timing
from malldir.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and (when configured) Redis health."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"

    redis_status = "disabled"
    if current_app.config.get("REDIS_URL"):
        try:
            get_redis().ping()
            redis_status = "ok"
        except RedisError:  # pragma: no cover - depends on Redis
            current_app.logger.exception("healthcheck.redis_error")
            redis_status = "fail"

    healthy = db_status == "ok" and redis_status != "fail"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "redis": redis_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)
