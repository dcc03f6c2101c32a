"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
import secrets

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

from samplecat.core.config import MIN_SIGNING_KEY_BYTES

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on ``ON DELETE CASCADE`` enforcement for SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def resolve_signing_key(app: Flask) -> str:
    """Return the access-token signing key, generating one if allowed.

    A configured ``JWT_SECRET_KEY`` must encode to at least
    :data:`~samplecat.core.config.MIN_SIGNING_KEY_BYTES` bytes. Otherwise a
    random key is generated for this process when
    ``JWT_ALLOW_EPHEMERAL_SECRET`` is set; tokens signed with it stop
    verifying after a restart.

    :raises RuntimeError: When the key is missing/weak and the fallback is off.
    """
    configured = app.config.get("JWT_SECRET_KEY") or ""
    if len(configured.encode("utf-8")) >= MIN_SIGNING_KEY_BYTES:
        return configured

    if not app.config.get("JWT_ALLOW_EPHEMERAL_SECRET", False):
        raise RuntimeError(
            "JWT_SECRET_KEY is missing or shorter than "
            f"{MIN_SIGNING_KEY_BYTES} bytes; set it or enable JWT_ALLOW_EPHEMERAL_SECRET."
        )

    log.warning(
        "JWT_SECRET_KEY is missing or weak; generated an ephemeral signing key. "
        "Tokens will not survive a restart and are not shared across workers."
    )
    return secrets.token_urlsafe(64)


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT and the optional Redis client.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. The signing key is
        resolved here, once, before any request is served.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from samplecat import models as _models  # noqa: F401

    migrate.init_app(app, db)

    app.config["JWT_SECRET_KEY"] = resolve_signing_key(app)
    jwt.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Set REDIS_URL.")
    return redis_client
