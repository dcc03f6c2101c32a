"""Opaque refresh tokens persisted per user."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from samplecat.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Random, unguessable token exchanged for new access tokens.

    Tokens are not rotated on use: the same string stays redeemable until
    ``expiry_date``. Deleting the owning user deletes its tokens.
    """

    __tablename__ = "refresh_tokens"
    __repr_attrs__ = ("user_id",)

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    user: Mapped[User] = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` once ``now`` reaches the expiry instant."""
        return as_utc(self.expiry_date) <= as_utc(now)
