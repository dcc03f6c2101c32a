from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum, auto
from typing import Protocol

# 32 random bytes, URL-safe base64 (43 chars).
TOKEN_BYTES = 32


def new_refresh_token() -> str:
    """Return a fresh unguessable token string, independent of any user data."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class RedeemStatus(Enum):
    """Outcome of looking a refresh token up."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()


@dataclass(frozen=True)
class RefreshTokenView:
    """
    Read-model for a stored refresh token.

    :ivar token: The opaque token string.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    """

    token: str
    user_id: int
    expires_at: datetime


@dataclass(frozen=True)
class RedeemResult:
    status: RedeemStatus
    view: RefreshTokenView | None = None

    @property
    def ok(self) -> bool:
        return self.status is RedeemStatus.OK


class RefreshTokenStore(Protocol):
    """
    Persistent store of refresh tokens.

    ``redeem`` reports failures through :class:`RedeemResult` instead of
    raising, so that deleting an expired token is never undone by the
    caller's transaction rolling back on the resulting error.
    """

    def create_for(self, user_id: int, *, now: datetime | None = None) -> str:
        """Persist a new token for ``user_id`` expiring ``now + ttl``."""
        ...

    def redeem(self, token: str, *, now: datetime | None = None) -> RedeemResult:
        """
        Look ``token`` up without consuming it.

        Expired tokens are deleted and reported as ``EXPIRED``; a later
        call for the same string reports ``NOT_FOUND``.
        """
        ...

    def revoke(self, token: str) -> None:
        """Delete ``token``; unknown tokens are ignored."""
        ...

    def revoke_all_for_user(self, user_id: int) -> int:
        """Delete every token of ``user_id``; returns how many were removed."""
        ...

    def purge_expired(self, *, now: datetime | None = None) -> int:
        """Delete every expired token; returns how many were removed."""
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local store, guarded by a lock. Suitable for tests and local runs.
    """

    def __init__(self, *, ttl: timedelta = timedelta(days=7)) -> None:
        self.ttl = ttl
        self._lock = threading.Lock()
        self._tokens: dict[str, RefreshTokenView] = {}

    def create_for(self, user_id: int, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(tz=UTC)
        token = new_refresh_token()
        with self._lock:
            self._tokens[token] = RefreshTokenView(
                token=token, user_id=int(user_id), expires_at=issued + self.ttl
            )
        return token

    def redeem(self, token: str, *, now: datetime | None = None) -> RedeemResult:
        current = now or datetime.now(tz=UTC)
        with self._lock:
            view = self._tokens.get(token)
            if view is None:
                return RedeemResult(RedeemStatus.NOT_FOUND)
            if view.expires_at <= current:
                del self._tokens[token]
                return RedeemResult(RedeemStatus.EXPIRED, view)
            return RedeemResult(RedeemStatus.OK, view)

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def revoke_all_for_user(self, user_id: int) -> int:
        with self._lock:
            doomed = [t for t, v in self._tokens.items() if v.user_id == int(user_id)]
            for t in doomed:
                del self._tokens[t]
        return len(doomed)

    def purge_expired(self, *, now: datetime | None = None) -> int:
        current = now or datetime.now(tz=UTC)
        with self._lock:
            doomed = [t for t, v in self._tokens.items() if v.expires_at <= current]
            for t in doomed:
                del self._tokens[t]
        return len(doomed)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._tokens
