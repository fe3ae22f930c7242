"""Trust ``X-Forwarded-*`` headers from a fixed number of reverse proxies."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``PROXY_FIX_HOPS`` > 0.

    The client address it restores is what the login rate limiter keys on,
    so the hop count must match the deployment exactly.
    """
    hops = int(app.config.get("PROXY_FIX_HOPS", 1))
    if hops > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)
