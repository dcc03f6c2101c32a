"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class UserSchema(Schema):
    """Public representation of a user."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(data_key="fullName", allow_none=True)
    profile_image_url = fields.String(data_key="profileImageUrl", allow_none=True)
    role = fields.String(required=True)
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)
    last_login = fields.DateTime(data_key="lastLogin", allow_none=True)


class ProfileFormSchema(Schema):
    """Multipart form fields for ``PATCH /users/me`` (the file is read separately)."""

    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(
        data_key="fullName", load_default=None, allow_none=True, validate=validate.Length(max=100)
    )


class ChangePasswordSchema(Schema):
    current_password = fields.String(
        data_key="currentPassword", required=True, validate=validate.Length(min=1, max=128)
    )
    new_password = fields.String(
        data_key="newPassword", required=True, validate=validate.Length(min=8, max=128)
    )
