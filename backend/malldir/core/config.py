"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_JWT", "CHANGE_ME_JWT_REFRESH"}
)

# Load .env during development (no-op when the file is absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    APP_ENV: str
        Name of the active environment.
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask session secret.
    JWT_SECRET_KEY: str
        HMAC key used to sign access tokens.
    JWT_REFRESH_SECRET_KEY: str
        HMAC key used to sign refresh tokens. Must differ from
        ``JWT_SECRET_KEY`` in production.
    JWT_ISSUER / JWT_AUDIENCE: str
        Values stamped into, and required from, every access token.
    JWT_ACCESS_TOKEN_EXPIRES: int
        Access-token lifetime in minutes.
    JWT_REFRESH_TOKEN_EXPIRES: int
        Refresh-token lifetime in days.
    REFRESH_COOKIE_NAME / REFRESH_COOKIE_PATH / REFRESH_COOKIE_SECURE
        Refresh cookie contract. ``Secure`` is forced on in production.
    BCRYPT_LOG_ROUNDS: int
        bcrypt cost factor consumed by ``flask-bcrypt``.
    SQLALCHEMY_DATABASE_URI: str | None
        Database connection string. Startup fails when missing.
    REDIS_URL: str | None
        When set, the revocation registry and refresh sessions live in Redis.
    AUTH_LOGIN_RATE_LIMIT: str
        ``flask-limiter`` expression applied to the login endpoint.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed client origins.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    APP_ENV = "development"
    API_BASE_PREFIX = "/api"

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_JWT_REFRESH")

    # Tokens
    JWT_ALGORITHM = "HS256"
    JWT_ISSUER = os.getenv("JWT_ISSUER", "MallDirectory")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "MallDirectoryUsers")
    JWT_ACCESS_TOKEN_EXPIRES = env_int("JWT_ACCESS_TOKEN_EXPIRES", 15)
    JWT_REFRESH_TOKEN_EXPIRES = env_int("JWT_REFRESH_TOKEN_EXPIRES", 7)

    # Refresh cookie
    REFRESH_COOKIE_NAME = "refreshToken"
    REFRESH_COOKIE_PATH = "/api"
    REFRESH_COOKIE_SECURE = env_bool("REFRESH_COOKIE_SECURE", False)

    # Passwords
    BCRYPT_LOG_ROUNDS = env_int("BCRYPT_LOG_ROUNDS", 10)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Shared cache for revocations / refresh sessions
    REDIS_URL = os.getenv("REDIS_URL")

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    # Reverse proxy: number of trusted hops, 0 disables ProxyFix
    PROXY_FIX_HOPS = env_int("PROXY_FIX_HOPS", 1)

    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Falls back to a local SQLite file when ``DATABASE_URL`` is unset and
    logs at ``DEBUG`` unless ``LOG_LEVEL`` says otherwise.
    """

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the bcrypt cost so the suite stays fast.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SECRET_KEY = "testing-session-secret-0123456789abcdef"
    JWT_SECRET_KEY = "testing-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET_KEY = "testing-refresh-secret-0123456789abcdef"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Requires every secret and the database URL to come from the environment
    (see :func:`validate_config`) and always marks the refresh cookie
    ``Secure``.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    REFRESH_COOKIE_SECURE = True


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Fail fast on settings the application cannot start without.

    :param config: Loaded Flask configuration.
    :raises RuntimeError: When the database URL is missing, or when a
        production deployment still uses placeholder or shared secrets or
        has no ``REDIS_URL``.
    """
    if not config.get("SQLALCHEMY_DATABASE_URI"):
        raise RuntimeError("DATABASE_URL is not configured; refusing to start.")

    if str(config.get("APP_ENV", "")).lower() != "production":
        return

    missing = [
        key
        for key in ("SECRET_KEY", "JWT_SECRET_KEY", "JWT_REFRESH_SECRET_KEY")
        if not config.get(key) or config.get(key) in PLACEHOLDER_SECRETS
    ]
    if missing:
        raise RuntimeError(f"Missing required secrets: {', '.join(missing)}")
    if config["JWT_SECRET_KEY"] == config["JWT_REFRESH_SECRET_KEY"]:
        raise RuntimeError("Access and refresh tokens must use distinct signing secrets.")
    # revocations and refresh sessions must be shared by every worker
    if not config.get("REDIS_URL"):
        raise RuntimeError("REDIS_URL is not configured; production needs shared token state.")
