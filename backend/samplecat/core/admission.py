"""Request admission: rate limiting, then bearer-token parsing.

A single ``before_request`` hook runs both steps in a fixed order, so a
request is charged against its bucket before any signature is checked and
an invalid token can never skip the limiter.

After admission ``g.identity`` holds the parsed
:class:`~samplecat.services._shared.ports.AccessTokenClaims` (``None`` for
anonymous requests) and ``g.access_token`` the raw token. Whether anonymous
access is acceptable is decided per route.
"""

from __future__ import annotations

import logging

from flask import Flask, current_app, g, request

from samplecat.core.components import get_rate_limiter, get_token_provider
from samplecat.core.errors import TooManyRequests, Unauthorized
from samplecat.core.rate_limit import RateLimitPolicy, client_key
from samplecat.services._shared.errors import InvalidTokenError

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def policies_from_config(app: Flask) -> tuple[RateLimitPolicy, RateLimitPolicy]:
    """Return ``(standard, auth)`` policies from the app config."""
    standard = RateLimitPolicy(
        name="standard",
        capacity=int(app.config["RATE_LIMIT_STANDARD_CAPACITY"]),
        window_seconds=float(app.config["RATE_LIMIT_STANDARD_WINDOW"]),
    )
    auth = RateLimitPolicy(
        name="auth",
        capacity=int(app.config["RATE_LIMIT_AUTH_CAPACITY"]),
        window_seconds=float(app.config["RATE_LIMIT_AUTH_WINDOW"]),
    )
    return standard, auth


def classify(
    path: str,
    *,
    auth_prefix: str,
    standard: RateLimitPolicy,
    auth: RateLimitPolicy,
    client: str,
) -> tuple[str, RateLimitPolicy]:
    """Pick exactly one ``(bucket_key, policy)`` for a request path."""
    if path.startswith(auth_prefix):
        return f"auth:{client}", auth
    return client, standard


def extract_bearer(header: str | None) -> str | None:
    """Return the token of a ``Bearer`` header, ``None`` for any other scheme."""
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip()


def enforce_rate_limit() -> None:
    """
    Charge the request against its bucket.

    :raises TooManyRequests: When the bucket is empty.
    """
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return
    standard, auth = current_app.extensions["rate_limit_policies"]
    client = client_key(request)
    key, policy = classify(
        request.path,
        auth_prefix=current_app.config.get("RATE_LIMIT_AUTH_PREFIX", "/api/auth/"),
        standard=standard,
        auth=auth,
        client=client,
    )
    if not get_rate_limiter().try_consume(key, policy):
        log.warning(
            "Rate limit exceeded",
            extra={"client_key": key, "policy": policy.name, "path": request.path},
        )
        raise TooManyRequests(retry_after=policy.retry_after)


def authenticate_bearer() -> None:
    """
    Parse an optional bearer token into ``g.identity``.

    :raises Unauthorized: When a bearer token is present but invalid or expired.
    """
    g.identity = None
    g.access_token = None
    token = extract_bearer(request.headers.get("Authorization"))
    if token is None:
        return
    try:
        claims = get_token_provider().parse(token)
    except InvalidTokenError as exc:
        raise Unauthorized(str(exc)) from exc
    g.identity = claims
    g.access_token = token


def init_app(app: Flask) -> None:
    """Register the admission hook; must run after the logging hook."""
    app.extensions["rate_limit_policies"] = policies_from_config(app)

    @app.before_request
    def _admit_request() -> None:
        if request.method == "OPTIONS":
            # CORS preflight carries no credentials.
            g.identity = None
            g.access_token = None
            return
        enforce_rate_limit()
        authenticate_bearer()
