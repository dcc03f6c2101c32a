from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from samplecat.services._shared.dto import ImageUpload


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public projection of a user.

    :param id: Primary key.
    :param username: Handle and token subject.
    :param email: Normalized email.
    :param full_name: Display name.
    :param profile_image_url: Public URL of the profile picture.
    :param role: Role name (``USER``, ``ADMIN``, ``MODERATOR``).
    :param created_at: Registration time.
    :param last_login: Time of the last successful login.
    """

    id: int
    username: str
    email: str
    full_name: str | None
    profile_image_url: str | None
    role: str
    created_at: datetime | None
    last_login: datetime | None


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """``full_name`` and ``image`` are applied only when not ``None``."""

    user_id: int
    full_name: str | None = None
    image: ImageUpload | None = None


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    user_id: int
    current_password: str
    new_password: str
