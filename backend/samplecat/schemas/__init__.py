"""Marshmallow schemas for request validation and response shaping."""

from __future__ import annotations

from .auth import (
    AuthResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    RegisterSchema,
)
from .common import MetaSchema, PaginationQuerySchema
from .sample import SampleFormSchema, SampleSchema
from .user import ChangePasswordSchema, ProfileFormSchema, UserSchema

__all__ = [
    "AuthResponseSchema",
    "ChangePasswordSchema",
    "LoginSchema",
    "LogoutSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "ProfileFormSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "SampleFormSchema",
    "SampleSchema",
    "UserSchema",
]
