from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from samplecat.models.base import as_utc
from samplecat.models.refresh_token import RefreshToken
from samplecat.repositories.refresh_token import RefreshTokenRepository
from samplecat.services._shared.ports import (
    RedeemResult,
    RedeemStatus,
    RefreshTokenStore,
    RefreshTokenView,
    new_refresh_token,
)

log = logging.getLogger(__name__)


def _flask_session() -> Session:
    from samplecat.core.extensions import db

    return db.session  # type: ignore[return-value]


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh tokens as rows of ``refresh_tokens``.

    The store never commits: it writes through the Flask-scoped session, so
    calls made inside a :class:`~samplecat.uow.SQLAlchemyUnitOfWork` join its
    transaction (a registration creates the user and its token atomically).

    :param ttl: Refresh token lifetime.
    :param session_provider: Returns the session to use; looked up per call.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(days=7),
        session_provider: Callable[[], Session] = _flask_session,
    ) -> None:
        self.ttl = ttl
        self._session_provider = session_provider

    def _repo(self) -> RefreshTokenRepository:
        return RefreshTokenRepository(session=self._session_provider())

    def create_for(self, user_id: int, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(UTC)
        token = new_refresh_token()
        self._repo().add(
            RefreshToken(token=token, user_id=int(user_id), expiry_date=issued + self.ttl)
        )
        return token

    def redeem(self, token: str, *, now: datetime | None = None) -> RedeemResult:
        if not token:
            return RedeemResult(RedeemStatus.NOT_FOUND)
        repo = self._repo()
        row = repo.get_by_token(token, for_update=True)
        if row is None:
            return RedeemResult(RedeemStatus.NOT_FOUND)

        view = RefreshTokenView(
            token=row.token, user_id=row.user_id, expires_at=as_utc(row.expiry_date)
        )
        if row.is_expired(now or datetime.now(UTC)):
            repo.delete_by_token(token)
            log.info("Expired refresh token deleted", extra={"user_id": row.user_id})
            return RedeemResult(RedeemStatus.EXPIRED, view)
        return RedeemResult(RedeemStatus.OK, view)

    def revoke(self, token: str) -> None:
        if token:
            self._repo().delete_by_token(token)

    def revoke_all_for_user(self, user_id: int) -> int:
        return self._repo().delete_for_user(int(user_id))

    def purge_expired(self, *, now: datetime | None = None) -> int:
        return self._repo().delete_expired(now or datetime.now(UTC))
