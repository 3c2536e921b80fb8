"""Settings classes selected by ``APP_ENV`` and read from the environment.

Token lifetimes are stored as :class:`~datetime.timedelta` so services can add
them to instants directly; the environment supplies whole minutes, hours or
seconds.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder signing secret; ``validate_config`` refuses it outside debug/testing
DEFAULT_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag such as ``USE_PROXYFIX=yes``; unset returns ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """
    Read an integer setting, treating unset or blank as ``default``.

    :raises ValueError: If the value is present but not an integer. The
        message names the variable so a bad deploy fails loudly.
    """
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


class BaseConfig:
    """Settings shared by every environment.

    Token settings
    --------------
    JWT_SECRET_KEY
        Shared HMAC key used to sign and verify every token.
    JWT_ALGORITHM
        ``HS256`` (default), ``HS384`` or ``HS512``.
    JWT_ISSUER
        ``iss`` claim stamped on issued tokens and required on presented ones.
    JWT_ACCESS_TOKEN_EXPIRES / JWT_REFRESH_TOKEN_EXPIRES
        Lifetimes; 15 minutes and 7 days unless overridden.
    JWT_LEEWAY
        Clock-skew tolerance for ``exp``/``nbf``/``iat``; zero by default.

    Infrastructure
    --------------
    SQLALCHEMY_DATABASE_URI is taken from ``DATABASE_URL``. ``USE_PROXYFIX``
    and ``PROXY_FIX_HOPS`` describe the reverse proxies in front of the
    service. ``CORS_ORIGINS`` is a comma separated origin list.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "authsvc")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=env_int("JWT_ACCESS_TOKEN_MINUTES", 15))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=env_int("JWT_REFRESH_TOKEN_HOURS", 7 * 24))
    JWT_LEEWAY = timedelta(seconds=env_int("JWT_LEEWAY_SECONDS", 0))

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXY_FIX_HOPS = env_int("PROXY_FIX_HOPS", 1)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:4200,http://localhost:8080")
    CORS_MAX_AGE = 600

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 300


class TestingConfig(BaseConfig):
    """
    Test runs against in-memory SQLite (or ``TEST_DATABASE_URL``).

    The signing secret is fixed so tokens minted in one fixture verify in
    another.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy-0123456789"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the settings class named by ``APP_ENV``, defaulting to development."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Check token settings before the application starts serving.

    :param config: Loaded Flask configuration.
    :raises RuntimeError: If the token settings are unusable.
    """
    secret = config.get("JWT_SECRET_KEY")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY must be set.")
    is_prod = not config.get("DEBUG") and not config.get("TESTING")
    if is_prod and secret == DEFAULT_JWT_SECRET:
        raise RuntimeError("Refusing to start with the placeholder JWT_SECRET_KEY.")

    for key in ("JWT_ACCESS_TOKEN_EXPIRES", "JWT_REFRESH_TOKEN_EXPIRES"):
        value = config.get(key)
        if not isinstance(value, timedelta) or value <= timedelta(0):
            raise RuntimeError(f"{key} must be a positive timedelta.")
