"""User repository: lookups by natural key and password updates."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select

from samplecat.models.user import User
from samplecat.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Never issues tokens; credential checks that mutate state (failed-login
    counting) belong to the authentication service.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "id": User.id,
            "username": User.username,
            "created_at": User.created_at,
        }

    def _updatable_fields(self):
        """Profile fields a user may change about themselves."""
        return {"full_name", "profile_image_url", "profile_image_id"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact (case-sensitive) username."""
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username_or_email(self, identifier: str, *, for_update: bool = False) -> User | None:
        """Resolve a login identifier that may be a username or an email.

        :param identifier: Raw value typed by the user.
        :type identifier: str
        :param for_update: Lock the row (``SELECT ... FOR UPDATE``) so that
            concurrent logins serialise their counter updates.
        :type for_update: bool
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        value = identifier.strip()
        stmt = select(User).where(or_(User.username == value, User.email == value.lower()))
        if for_update:
            stmt = stmt.with_for_update()
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return self.session.execute(stmt).first() is not None

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Hash and assign ``new_password`` (model setter), then flush."""
        user.password = new_password
        self.flush()
