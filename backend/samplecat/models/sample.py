"""Catalog sample: a named, optionally image-attached record owned by a user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from samplecat.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class Sample(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Fields
    ------
    name : str
        3 to 100 characters, trimmed.
    description : str | None
        Up to 500 characters.
    image_url, image_id : str | None
        Public URL and store id of the attached image.
    user_id : int
        Owner; only the owner may update or delete the sample.
    """

    __tablename__ = "samples"
    __repr_attrs__ = ("name", "user_id")

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped[User] = relationship("User", back_populates="samples", lazy="joined")

    __table_args__ = (
        Index("ix_samples_user_id", "user_id"),
        Index("ix_samples_created_at", "created_at"),
    )

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("Name is required.")
        v = value.strip()
        if not NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
            )
        return v

    @validates("description")
    def _validate_description(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters."
            )
        return value

    def is_owned_by(self, user_id: int | None) -> bool:
        return user_id is not None and self.user_id == user_id
