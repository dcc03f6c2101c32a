"""Sample resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from samplecat.models.sample import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, NAME_MIN_LENGTH


class SampleSchema(Schema):
    """Public representation of a sample."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    description = fields.String(allow_none=True)
    image_url = fields.String(data_key="imageUrl", allow_none=True)
    user_id = fields.Integer(data_key="userId", required=True)
    username = fields.String(required=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    updated_at = fields.DateTime(data_key="updatedAt", allow_none=True)


class SampleFormSchema(Schema):
    """Multipart form fields for create/update; load with ``partial=True`` to update."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(
        required=True,
        validate=validate.Length(min=NAME_MIN_LENGTH, max=NAME_MAX_LENGTH),
    )
    description = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH)
    )
