"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

import re
from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_CAMEL_RE = re.compile(r"[A-Z]")


class PaginationQuerySchema(Schema):
    """Validate ``page``/``limit``/``sort`` query parameters.

    ``limit`` defaults to 20 and is clamped to 100; ``sort`` is a
    comma-separated list such as ``-createdAt,name``.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(load_default=DEFAULT_LIMIT, validate=validate.Range(min=1))
    sort = fields.String(load_default="")

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        raw = data.get("sort") or ""
        data["sort"] = [_snake(segment.strip()) for segment in raw.split(",") if segment.strip()]
        data["limit"] = min(max(int(data["limit"]), 1), MAX_LIMIT)
        return data


def _snake(token: str) -> str:
    """``-createdAt`` -> ``-created_at``; repository whitelists do the rest."""
    return _CAMEL_RE.sub(lambda m: "_" + m.group(0).lower(), token)


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total = fields.Integer(required=True)
    has_prev = fields.Boolean(data_key="hasPrev")
    has_next = fields.Boolean(data_key="hasNext")
