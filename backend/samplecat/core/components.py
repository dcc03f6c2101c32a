"""Construct the process-wide adapters and expose them through ``app.extensions``.

Installed once by the application factory, after :mod:`samplecat.core.extensions`
(the JWT signing key and the Redis client must already be resolved).
"""

from __future__ import annotations

import logging
from typing import Any, cast

from flask import Flask, current_app

from samplecat.core.rate_limit import TokenBucketRateLimiter
from samplecat.services._shared.ports import (
    DisabledImageStore,
    ImageStore,
    RefreshTokenStore,
    TokenProvider,
)

log = logging.getLogger(__name__)

RATE_LIMITER = "rate_limiter"
TOKEN_PROVIDER = "token_provider"
REFRESH_TOKEN_STORE = "refresh_token_store"
IMAGE_STORE = "image_store"


def build_refresh_token_store(app: Flask) -> RefreshTokenStore:
    """
    Pick the refresh token backend from ``REFRESH_TOKEN_BACKEND``.

    :raises RuntimeError: On an unknown backend name.
    """
    backend = (app.config.get("REFRESH_TOKEN_BACKEND") or "database").strip().lower()
    ttl = app.config["REFRESH_TOKEN_TTL"]
    if backend == "database":
        from samplecat.infra.db.sqlalchemy_refresh_token_store import (
            SQLAlchemyRefreshTokenStore,
        )

        return SQLAlchemyRefreshTokenStore(ttl=ttl)
    if backend == "redis":
        from samplecat.core.extensions import get_redis
        from samplecat.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(r=get_redis(), ttl=ttl)
    raise RuntimeError(f"Unknown REFRESH_TOKEN_BACKEND {backend!r}")


def build_image_store(app: Flask) -> ImageStore:
    bucket = app.config.get("IMAGE_STORE_BUCKET")
    if not bucket:
        log.warning("IMAGE_STORE_BUCKET is not set; image uploads are disabled.")
        return DisabledImageStore()

    from samplecat.infra.storage.s3_image_store import S3ImageStore

    return S3ImageStore(
        bucket,
        region=app.config.get("IMAGE_STORE_REGION") or None,
        endpoint_url=app.config.get("IMAGE_STORE_ENDPOINT_URL") or None,
        public_base_url=app.config.get("IMAGE_STORE_PUBLIC_BASE_URL") or None,
    )


def init_app(app: Flask, *, overrides: dict[str, Any] | None = None) -> None:
    """Install adapters; ``overrides`` replaces any of them by extension key."""
    from samplecat.infra.jwt.flask_jwt_token_provider import JWTTokenProvider

    overrides = overrides or {}
    defaults = {
        RATE_LIMITER: lambda: TokenBucketRateLimiter(
            sweep_interval=float(app.config.get("RATE_LIMIT_SWEEP_INTERVAL", 300))
        ),
        TOKEN_PROVIDER: JWTTokenProvider,
        REFRESH_TOKEN_STORE: lambda: build_refresh_token_store(app),
        IMAGE_STORE: lambda: build_image_store(app),
    }
    # Membership, not truthiness: the limiter is empty (falsy) when fresh.
    for key, build in defaults.items():
        app.extensions[key] = overrides[key] if key in overrides else build()


def get_rate_limiter() -> TokenBucketRateLimiter:
    return cast(TokenBucketRateLimiter, current_app.extensions[RATE_LIMITER])


def get_token_provider() -> TokenProvider:
    return cast(TokenProvider, current_app.extensions[TOKEN_PROVIDER])


def get_refresh_token_store() -> RefreshTokenStore:
    return cast(RefreshTokenStore, current_app.extensions[REFRESH_TOKEN_STORE])


def get_image_store() -> ImageStore:
    return cast(ImageStore, current_app.extensions[IMAGE_STORE])
