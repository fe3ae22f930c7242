"""Wire token components into the Flask app and expose per-request builders.

The revocation registry and refresh session store are created once per app
and kept in ``app.extensions``: Redis-backed when ``REDIS_URL`` is set,
process-local otherwise.
"""

from __future__ import annotations

from datetime import timedelta
from typing import cast

from flask import Flask, Response, current_app

from malldir.core.extensions import get_redis
from malldir.infra.jwt.pyjwt_codec import PyJWTCodec
from malldir.services._shared.ports import (
    InMemoryRefreshSessionStore,
    InMemoryRevocationRegistry,
    RefreshSessionStore,
    RevocationRegistry,
)
from malldir.services.accounts import AccountService
from malldir.services.auth import AuthService
from malldir.services.tokens import TokenConfig, TokenIssuer, TokenVerifier

REGISTRY_KEY = "malldir.revocation_registry"
REFRESH_STORE_KEY = "malldir.refresh_store"
TOKEN_CONFIG_KEY = "malldir.token_config"


def init_app(app: Flask) -> None:
    """Build the shared token state for ``app``.

    Must run after :func:`malldir.core.extensions.init_app` so the Redis
    client, when configured, is already connected.
    """
    cfg = TokenConfig.from_mapping(app.config)
    app.extensions[TOKEN_CONFIG_KEY] = cfg

    if app.config.get("REDIS_URL"):
        from malldir.infra.redis.refresh_session_store import RedisRefreshSessionStore
        from malldir.infra.redis.revocation_registry import RedisRevocationRegistry

        client = get_redis()
        registry: RevocationRegistry = RedisRevocationRegistry(client, ttl=cfg.access_expires)
        store: RefreshSessionStore = RedisRefreshSessionStore(client)
        backend = "redis"
    else:
        registry = InMemoryRevocationRegistry(ttl=cfg.access_expires)
        store = InMemoryRefreshSessionStore()
        backend = "memory"

    app.extensions[REGISTRY_KEY] = registry
    app.extensions[REFRESH_STORE_KEY] = store
    app.logger.info("Token state backend: %s", backend)


# ------------------------------ Accessors ------------------------------------


def token_config() -> TokenConfig:
    return cast(TokenConfig, current_app.extensions[TOKEN_CONFIG_KEY])


def revocation_registry() -> RevocationRegistry:
    return cast(RevocationRegistry, current_app.extensions[REGISTRY_KEY])


def refresh_store() -> RefreshSessionStore:
    return cast(RefreshSessionStore, current_app.extensions[REFRESH_STORE_KEY])


def build_issuer() -> TokenIssuer:
    cfg = token_config()
    return TokenIssuer(config=cfg, codec=PyJWTCodec(cfg.algorithm), refresh_store=refresh_store())


def build_verifier() -> TokenVerifier:
    cfg = token_config()
    return TokenVerifier(
        config=cfg, codec=PyJWTCodec(cfg.algorithm), registry=revocation_registry()
    )


def build_auth_service() -> AuthService:
    return AuthService(
        issuer=build_issuer(),
        verifier=build_verifier(),
        registry=revocation_registry(),
        refresh_store=refresh_store(),
    )


def build_account_service() -> AccountService:
    return AccountService()


# ---------------------------- Refresh cookie ---------------------------------


def set_refresh_cookie(response: Response, token: str) -> Response:
    """Attach the refresh token as an HttpOnly, SameSite=Strict cookie."""
    cfg = token_config()
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        token,
        max_age=int(cfg.refresh_expires / timedelta(seconds=1)),
        path=current_app.config["REFRESH_COOKIE_PATH"],
        httponly=True,
        secure=bool(current_app.config.get("REFRESH_COOKIE_SECURE")),
        samesite="Strict",
    )
    return response


def clear_refresh_cookie(response: Response) -> Response:
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        path=current_app.config["REFRESH_COOKIE_PATH"],
        httponly=True,
        secure=bool(current_app.config.get("REFRESH_COOKIE_SECURE")),
        samesite="Strict",
    )
    return response
