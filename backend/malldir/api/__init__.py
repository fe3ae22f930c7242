"""HTTP API: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from flask import Flask


def init_app(app: Flask) -> None:
    """Mount every v1 blueprint at ``<API_BASE_PREFIX>/v1/<relative prefix>``."""

    from malldir.api.v1 import API_VERSION, REGISTRY

    version_prefix = f"{app.config.get('API_BASE_PREFIX', '/api').rstrip('/')}/{API_VERSION}"
    for bp, rel_prefix in REGISTRY:
        rel = rel_prefix.strip("/")
        app.register_blueprint(bp, url_prefix=f"{version_prefix}/{rel}" if rel else version_prefix)


__all__ = ["init_app"]
