"""User profile endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from samplecat.api.deps import (
    current_actor_id,
    envelope,
    read_image,
    require_auth,
    timing,
    user_service,
)
from samplecat.schemas import ChangePasswordSchema, ProfileFormSchema, UserSchema
from samplecat.services.users.dto import ChangePasswordIn, ProfileUpdateIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
profile_form_schema = ProfileFormSchema()
change_password_schema = ChangePasswordSchema()


@bp.get("/me")
@require_auth
@timing
def get_me():
    user = user_service().get_me(current_actor_id())
    return envelope(user_schema.dump(user), message="User profile retrieved")


@bp.patch("/me")
@require_auth
@timing
def update_me():
    """Multipart: ``fullName`` and/or ``profileImage``."""
    form = profile_form_schema.load(request.form)
    dto = ProfileUpdateIn(
        user_id=current_actor_id(),
        full_name=form["full_name"],
        image=read_image("profileImage"),
    )
    user = user_service().update_profile(dto)
    return envelope(user_schema.dump(user), message="Profile updated successfully")


@bp.delete("/me")
@require_auth
@timing
def delete_me():
    user_service().delete_account(current_actor_id())
    return envelope(None, message="Account deleted successfully")


@bp.post("/me/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(request.get_json(silent=True) or {})
    user_service().change_password(ChangePasswordIn(user_id=current_actor_id(), **data))
    return envelope(None, message="Password updated successfully")


@bp.get("/profile/<string:username>")
@require_auth
@timing
def get_profile(username: str):
    user = user_service().get_profile(username)
    return envelope(user_schema.dump(user), message="User found")
