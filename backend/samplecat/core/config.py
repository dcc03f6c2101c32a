"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Minimum encoded length of the token signing secret (256 bits).
MIN_SIGNING_KEY_BYTES: Final[int] = 32


# Load .env when present (no-op otherwise)
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
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens. Must
        encode to at least :data:`MIN_SIGNING_KEY_BYTES` bytes.
    JWT_ALLOW_EPHEMERAL_SECRET: bool
        When ``True`` a missing or weak ``JWT_SECRET_KEY`` is replaced by a
        random per-process key (with a warning). When ``False`` startup fails.
    JWT_ACCESS_TOKEN_EXPIRES: datetime.timedelta
        Lifetime of access tokens.
    REFRESH_TOKEN_TTL: datetime.timedelta
        Lifetime of refresh tokens (7 days by default).
    REFRESH_TOKEN_BACKEND: str
        ``"database"`` or ``"redis"``.
    RATE_LIMIT_*: int | str | bool
        Token-bucket policies for the admission layer.
    IMAGE_STORE_*: str
        S3-compatible storage for sample and profile images.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ALLOW_EPHEMERAL_SECRET = env_bool("JWT_ALLOW_EPHEMERAL_SECRET", False)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=env_int("JWT_ACCESS_TOKEN_EXPIRES", 3600))
    REFRESH_TOKEN_TTL = timedelta(seconds=env_int("REFRESH_TOKEN_TTL", 7 * 24 * 3600))
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "database")
    REDIS_URL = os.getenv("REDIS_URL", "")

    # Admission: rate limiting
    RATE_LIMIT_ENABLED = env_bool("RATE_LIMIT_ENABLED", True)
    RATE_LIMIT_STANDARD_CAPACITY = env_int("RATE_LIMIT_STANDARD_CAPACITY", 100)
    RATE_LIMIT_STANDARD_WINDOW = env_int("RATE_LIMIT_STANDARD_WINDOW", 60)
    RATE_LIMIT_AUTH_CAPACITY = env_int("RATE_LIMIT_AUTH_CAPACITY", 10)
    RATE_LIMIT_AUTH_WINDOW = env_int("RATE_LIMIT_AUTH_WINDOW", 60)
    RATE_LIMIT_AUTH_PREFIX = os.getenv("RATE_LIMIT_AUTH_PREFIX", "/api/auth/")
    RATE_LIMIT_SWEEP_INTERVAL = env_int("RATE_LIMIT_SWEEP_INTERVAL", 300)

    # Image storage (S3 compatible)
    IMAGE_STORE_BUCKET = os.getenv("IMAGE_STORE_BUCKET", "")
    IMAGE_STORE_REGION = os.getenv("IMAGE_STORE_REGION", "us-east-1")
    IMAGE_STORE_ENDPOINT_URL = os.getenv("IMAGE_STORE_ENDPOINT_URL", "")
    IMAGE_STORE_PUBLIC_BASE_URL = os.getenv("IMAGE_STORE_PUBLIC_BASE_URL", "")
    IMAGE_STORE_FOLDER = os.getenv("IMAGE_STORE_FOLDER", "samplecat")
    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH", 10 * 1024 * 1024)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, proxy & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    CORS_MAX_AGE = 3600

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and tolerates a missing signing secret by
    generating an ephemeral one.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_ALLOW_EPHEMERAL_SECRET = env_bool("JWT_ALLOW_EPHEMERAL_SECRET", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_ALLOW_EPHEMERAL_SECRET = True
    REFRESH_TOKEN_BACKEND = "database"
    REDIS_URL = ""
    IMAGE_STORE_BUCKET = ""
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. ``JWT_SECRET_KEY`` is mandatory:
    the ephemeral fallback only activates with an explicit
    ``JWT_ALLOW_EPHEMERAL_SECRET=1``.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


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
