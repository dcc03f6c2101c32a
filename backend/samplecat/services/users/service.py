# samplecat/services/users/service.py
from __future__ import annotations

import logging

from samplecat.models import Role, User
from samplecat.services._shared.base import BaseService
from samplecat.services._shared.errors import (
    AuthenticationError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
)
from samplecat.services._shared.ports import ImageStore, RefreshTokenStore, StoredImage
from samplecat.services.users.dto import ChangePasswordIn, ProfileUpdateIn, UserOut

log = logging.getLogger(__name__)

PROFILE_SUBFOLDER = "profiles"


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        profile_image_url=user.profile_image_url,
        role=user.role.value if isinstance(user.role, Role) else str(user.role),
        created_at=user.created_at,
        last_login=user.last_login,
    )


class UserService(BaseService):
    """
    Profile use cases for registered users.

    Image uploads happen before the database transaction; the replaced (or
    orphaned) image is deleted afterwards on a best-effort basis, so a failing
    image host never rolls back a committed change.
    """

    def __init__(
        self,
        *,
        image_store: ImageStore,
        refresh_store: RefreshTokenStore,
        image_folder: str = "samplecat",
    ) -> None:
        super().__init__()
        self.images = image_store
        self.refresh_store = refresh_store
        self.folder = f"{image_folder.strip('/')}/{PROFILE_SUBFOLDER}"

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_me(self, user_id: int) -> UserOut:
        """
        :raises NotFoundError: When the user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return to_user_out(user)

    def get_profile(self, username: str) -> UserOut:
        """
        Public profile by exact username.

        :raises NotFoundError: When no user has that username.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_username(username)
            if user is None:
                raise NotFoundError("User", username)
            return to_user_out(user)

    def resolve_actor(self, subject: str) -> UserOut:
        """
        Load the user named by an access token subject.

        :raises InvalidTokenError: When the subject no longer exists.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_username(subject)
            if user is None:
                raise InvalidTokenError()
            return to_user_out(user)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def update_profile(self, dto: ProfileUpdateIn) -> UserOut:
        """
        Update the display name and/or replace the profile picture.

        :raises NotFoundError: When the user does not exist.
        :raises ImageUploadError: When the new image cannot be stored.
        """
        uploaded: StoredImage | None = None
        if dto.image is not None:
            uploaded = self.images.upload(
                dto.image.data, folder=self.folder, content_type=dto.image.content_type
            )

        old_image_id: str | None = None
        try:
            with self.rw_uow() as uow:
                user = uow.users.get(dto.user_id)
                if user is None:
                    raise NotFoundError("User", dto.user_id)

                changes: dict[str, object] = {}
                if dto.full_name is not None:
                    changes["full_name"] = dto.full_name.strip() or None
                if uploaded is not None:
                    old_image_id = user.profile_image_id
                    changes["profile_image_url"] = uploaded.url
                    changes["profile_image_id"] = uploaded.image_id
                uow.users.assign_updates(user, changes)
                out = to_user_out(user)
        except Exception:
            if uploaded is not None:
                self.images.delete(uploaded.image_id)
            raise

        if old_image_id:
            self.images.delete(old_image_id)
        return out

    def change_password(self, dto: ChangePasswordIn) -> None:
        """
        :raises AuthenticationError: When ``current_password`` is wrong.
        :raises NotFoundError: When the user does not exist.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_for_update(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            if not user.verify_password(dto.current_password):
                raise AuthenticationError("Current password is incorrect")
            try:
                uow.users.update_password(user, dto.new_password)
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
        log.info("Password changed", extra={"user_id": dto.user_id})

    def delete_account(self, user_id: int) -> None:
        """
        Delete the user, their samples and refresh tokens.

        Images are removed from the host after the commit, best-effort.

        :raises NotFoundError: When the user does not exist.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            image_ids = [user.profile_image_id] + [s.image_id for s in user.samples]
            self.refresh_store.revoke_all_for_user(user.id)
            uow.users.delete(user)

        for image_id in filter(None, image_ids):
            self.images.delete(image_id)
        log.info("Account deleted", extra={"user_id": user_id})
