"""Per-environment settings classes, populated from the process environment.

``APP_ENV`` picks the class (see :func:`get_config`); a ``.env`` file in the
working directory is loaded first when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

load_dotenv()

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """``True`` for 1/true/yes/y/on (any case), ``default`` when unset."""
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    val = os.getenv(name, "").strip()
    return int(val) if val else default


def env_seconds(name: str, default: timedelta) -> timedelta:
    """Read a duration given in whole seconds."""
    return timedelta(seconds=env_int(name, int(default.total_seconds())))


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Lifetime of member and guest access tokens.
    JWT_REFRESH_TOKEN_EXPIRES: timedelta
        Lifetime of refresh tokens; also the expiry stamped on session rows.
    REDIS_URL: str | None
        Redis backing the access-token denylist. Unset means in-process.
    DENYLIST_KEY_PREFIX: str
        Namespace for denylist keys in a shared Redis.
    AUTH_LOGIN_RATE_LIMIT, AUTH_JOIN_RATE_LIMIT: str
        Flask-Limiter expressions for the credential endpoints.
    PAGINATION_DEFAULT_LIMIT, PAGINATION_MAX_LIMIT: int
        Page size when ``limit`` is omitted, and its ceiling.
    USE_PROXYFIX, PROXYFIX_HOPS:
        Trust ``X-Forwarded-*`` so session rows record the real client IP.
    """

    APP_ENV = "development"
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    # Secrets and tokens
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = env_seconds("JWT_ACCESS_TOKEN_EXPIRES", timedelta(hours=1))
    JWT_REFRESH_TOKEN_EXPIRES = env_seconds("JWT_REFRESH_TOKEN_EXPIRES", timedelta(days=7))
    JWT_TOKEN_LOCATION = ["headers"]

    # Persistence
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO")

    # Denylist and rate limiting
    REDIS_URL = os.getenv("REDIS_URL") or None
    DENYLIST_KEY_PREFIX = os.getenv("DENYLIST_KEY_PREFIX", "forum:denylist:")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    AUTH_JOIN_RATE_LIMIT = os.getenv("AUTH_JOIN_RATE_LIMIT", "10 per hour")

    # Listings
    PAGINATION_DEFAULT_LIMIT = env_int("PAGINATION_DEFAULT_LIMIT", 20)
    PAGINATION_MAX_LIMIT = env_int("PAGINATION_MAX_LIMIT", 100)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """In-memory SQLite (unless ``TEST_DATABASE_URL``), no Redis, no rate limits."""

    APP_ENV = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "testing-jwt-secret-key-with-enough-entropy"
    SECRET_KEY = "testing-secret"
    PROPAGATE_EXCEPTIONS = True
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    APP_ENV = "production"
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Settings class named by ``APP_ENV``; development when unset or unknown."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
