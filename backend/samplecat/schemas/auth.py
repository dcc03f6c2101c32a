"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True, validate=validate.Length(max=100))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    full_name = fields.String(
        data_key="fullName", load_default=None, allow_none=True, validate=validate.Length(max=100)
    )


class LoginSchema(Schema):
    """Input payload for authenticating a user by username or email."""

    username_or_email = fields.String(
        data_key="usernameOrEmail", required=True, validate=validate.Length(min=1, max=100)
    )
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(
        data_key="refreshToken", required=True, validate=validate.Length(min=1)
    )


class LogoutSchema(Schema):
    """Logout never fails; a missing token is accepted."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None, allow_none=True)


class AuthResponseSchema(Schema):
    """Tokens plus the authenticated user's summary."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
    token_type = fields.Constant("Bearer", data_key="tokenType")
    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
