"""HTTP edge settings: upstream proxy headers and cross-origin access."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

# Browsers must be able to send bearer tokens and read the limiter's hints.
ALLOWED_HEADERS = ("Authorization", "Content-Type", "X-Request-ID")
EXPOSED_HEADERS = ("X-Request-ID", "Retry-After")


def parse_origins(raw: str | None) -> list[str] | None:
    """Split ``CORS_ORIGINS``; ``None`` means any origin.

    >>> parse_origins("https://a.example, https://b.example")
    ['https://a.example', 'https://b.example']
    >>> parse_origins("*") is None
    True
    """
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return None
    return origins


def init_proxy(app: Flask) -> None:
    """Wrap the WSGI app in ProxyFix when ``USE_PROXYFIX`` is set.

    ProxyFix rewrites ``REMOTE_ADDR`` only; rate-limit keys read the raw
    ``X-Forwarded-For`` header (:func:`samplecat.core.rate_limit.client_key`).
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)


def init_cors(app: Flask) -> None:
    """Enable CORS on ``/api/*``; credentials only with an explicit origin list."""
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=origins is not None,
        allow_headers=list(ALLOWED_HEADERS),
        expose_headers=list(EXPOSED_HEADERS),
        max_age=app.config.get("CORS_MAX_AGE", 3600),
    )
