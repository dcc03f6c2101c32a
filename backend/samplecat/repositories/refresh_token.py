"""Refresh token repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from samplecat.models.refresh_token import RefreshToken
from samplecat.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for :class:`RefreshToken` rows.

    Deletions are issued as bulk ``DELETE`` statements: removing a row that a
    concurrent request already removed affects zero rows instead of raising
    ``StaleDataError`` at flush.
    """

    model = RefreshToken

    def get_by_token(self, token: str, *, for_update: bool = False) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        if for_update:
            stmt = stmt.with_for_update()
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def list_for_user(self, user_id: int) -> list[RefreshToken]:
        return self.list(filters={"user_id": user_id})

    def delete_by_token(self, token: str) -> int:
        """Delete the row holding ``token``; returns the number of rows removed."""
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def delete_for_user(self, user_id: int) -> int:
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        """Purge every token whose expiry is at or before ``now``."""
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.expiry_date <= now)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
