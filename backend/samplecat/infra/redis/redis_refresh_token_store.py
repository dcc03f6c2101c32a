from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis  # type: ignore[import-untyped]

from samplecat.services._shared.ports import (
    RedeemResult,
    RedeemStatus,
    RefreshTokenStore,
    RefreshTokenView,
    new_refresh_token,
)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout: one hash ``rt:{token}`` (``user_id``, ``issued_at``,
    ``expires_at`` as epoch seconds) plus a per-user set ``rt:u:{user_id}``
    used by :meth:`revoke_all_for_user`.

    Hashes outlive their logical expiry by ``expiry_grace`` so that late
    redemptions are reported as ``EXPIRED`` (and deleted) rather than
    silently vanishing as ``NOT_FOUND``.

    :param r: A Redis client (already connected).
    :param ttl: Refresh token lifetime.
    :param expiry_grace: Extra Redis TTL kept after logical expiry.
    """

    r: redis.Redis
    ttl: timedelta = timedelta(days=7)
    expiry_grace: timedelta = timedelta(days=1)

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: int | str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    def _delete(self, token: str, user_id: int | str | None) -> None:
        pipe = self.r.pipeline(transaction=True)
        pipe.delete(self._k(token))
        if user_id is not None:
            pipe.srem(self._ku(user_id), token)
        pipe.execute()

    # -------------------- API ------------------------

    def create_for(self, user_id: int, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(UTC)
        expires = issued + self.ttl
        token = new_refresh_token()
        redis_ttl = max(1, int((self.ttl + self.expiry_grace).total_seconds()))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            self._k(token),
            mapping={
                "user_id": str(user_id),
                "issued_at": str(self._to_ts(issued)),
                "expires_at": str(self._to_ts(expires)),
            },
        )
        pipe.expire(self._k(token), redis_ttl)
        pipe.sadd(self._ku(user_id), token)
        # The newest token always expires last, so it bounds the index lifetime.
        pipe.expire(self._ku(user_id), redis_ttl)
        pipe.execute()
        return token

    def redeem(self, token: str, *, now: datetime | None = None) -> RedeemResult:
        if not token:
            return RedeemResult(RedeemStatus.NOT_FOUND)
        h = self.r.hgetall(self._k(token))
        if not h or b"user_id" not in h:
            return RedeemResult(RedeemStatus.NOT_FOUND)

        user_id = int(h[b"user_id"].decode())
        expires_ts = int(h.get(b"expires_at", b"0").decode())
        view = RefreshTokenView(
            token=token,
            user_id=user_id,
            expires_at=datetime.fromtimestamp(expires_ts, tz=UTC),
        )
        if expires_ts <= self._to_ts(now or datetime.now(UTC)):
            self._delete(token, user_id)
            return RedeemResult(RedeemStatus.EXPIRED, view)
        return RedeemResult(RedeemStatus.OK, view)

    def revoke(self, token: str) -> None:
        if not token:
            return
        uid = self.r.hget(self._k(token), "user_id")
        self._delete(token, uid.decode() if uid else None)

    def revoke_all_for_user(self, user_id: int) -> int:
        members = self.r.smembers(self._ku(user_id))
        pipe = self.r.pipeline(transaction=True)
        for raw in members:
            pipe.delete(self._k(raw.decode()))
        pipe.delete(self._ku(user_id))
        results = pipe.execute()
        # Last result is the index deletion itself.
        return int(sum(results[:-1]))

    def purge_expired(self, *, now: datetime | None = None) -> int:
        """Redis expires hashes on its own (after the grace period); nothing to do."""
        return 0
