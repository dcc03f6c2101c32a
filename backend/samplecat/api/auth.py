"""Authentication endpoints: register, login, refresh, logout."""

from __future__ import annotations

from flask import Blueprint, request

from samplecat.api.deps import auth_service, envelope, timing
from samplecat.schemas import (
    AuthResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    RegisterSchema,
)
from samplecat.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
auth_response_schema = AuthResponseSchema()


@bp.post("/register")
@timing
def register():
    """Create an account and return a token pair."""
    data = register_schema.load(request.get_json(silent=True) or {})
    result = auth_service().register(RegisterIn(**data))
    return envelope(
        auth_response_schema.dump(result), message="User registered successfully", status=201
    )


@bp.post("/login")
@timing
def login():
    """Authenticate by username or email."""
    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service().login(LoginIn(**data))
    return envelope(auth_response_schema.dump(result), message="Login successful")


@bp.post("/refresh")
@timing
def refresh():
    """New access token; the refresh token is returned unchanged."""
    data = refresh_schema.load(request.get_json(silent=True) or {})
    result = auth_service().refresh(RefreshIn(**data))
    return envelope(auth_response_schema.dump(result), message="Token refreshed successfully")


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token; always succeeds."""
    data = logout_schema.load(request.get_json(silent=True) or {})
    auth_service().logout(LogoutIn(**data))
    return envelope(None, message="Logout successful")
