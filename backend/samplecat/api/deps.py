"""Shared API helpers: envelopes, authentication guard, service factories."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from werkzeug.datastructures import FileStorage

from samplecat.core.components import (
    get_image_store,
    get_refresh_token_store,
    get_token_provider,
)
from samplecat.core.errors import Unauthorized
from samplecat.schemas import PaginationQuerySchema
from samplecat.services._shared.dto import ImageUpload
from samplecat.services._shared.errors import InvalidTokenError
from samplecat.services.auth.service import AuthService
from samplecat.services.samples.dto import SampleListIn
from samplecat.services.samples.service import SampleService
from samplecat.services.users.service import UserService

F = TypeVar("F", bound=Callable[..., Any])


def envelope(data: Any = None, *, message: str, status: int = 200) -> Response:
    """Return the ``{success, message, data}`` response used by every endpoint."""
    response = jsonify({"success": True, "message": message, "data": data})
    response.status_code = status
    return response


# ------------------------------ Services ---------------------------------


def auth_service() -> AuthService:
    return AuthService(
        token_provider=get_token_provider(),
        refresh_store=get_refresh_token_store(),
    )


def user_service() -> UserService:
    return UserService(
        image_store=get_image_store(),
        refresh_store=get_refresh_token_store(),
        image_folder=current_app.config.get("IMAGE_STORE_FOLDER", "samplecat"),
    )


def sample_service() -> SampleService:
    return SampleService(
        image_store=get_image_store(),
        image_folder=current_app.config.get("IMAGE_STORE_FOLDER", "samplecat"),
    )


# ------------------------------ Request parsing ---------------------------


def parse_list_query() -> SampleListIn:
    data = PaginationQuerySchema().load(request.args)
    return SampleListIn(page=data["page"], limit=data["limit"], sort=tuple(data["sort"]))


def read_image(field: str) -> ImageUpload | None:
    """Return the uploaded file ``field`` or ``None`` when absent/empty."""
    storage: FileStorage | None = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    data = storage.read()
    if not data:
        return None
    return ImageUpload(data=data, content_type=storage.mimetype or None, filename=storage.filename)


def current_actor_id() -> int:
    """Id of the user resolved by :func:`require_auth`."""
    return int(g.actor_id)


# ------------------------------ Guards ------------------------------------


def require_auth(func: F) -> F:
    """
    Require a bearer token whose subject is an existing user.

    Admission already parsed the token into ``g.identity``; this resolves the
    subject and re-validates the token against that user.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        claims = getattr(g, "identity", None)
        token = getattr(g, "access_token", None)
        if claims is None or token is None:
            raise Unauthorized("Authentication required")
        try:
            user = user_service().resolve_actor(claims.subject)
        except InvalidTokenError as exc:
            raise Unauthorized(str(exc)) from exc
        if not get_token_provider().is_valid(token, user):
            raise Unauthorized("Invalid token")
        g.actor_id = user.id
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
