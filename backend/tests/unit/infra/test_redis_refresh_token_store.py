"""
Unit tests for RedisRefreshTokenStore using fakeredis.

Flows covered:
- create_for + redeem
- expiry (reported once, then gone)
- revoke and revoke_all_for_user
- key TTLs
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from samplecat.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from samplecat.services._shared.ports import RedeemStatus


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC).replace(microsecond=0)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRefreshTokenStore(r=fake_redis, ttl=timedelta(hours=1))


def test_create_and_redeem(store, fake_redis):
    now = _now()
    token = store.create_for(7, now=now)

    result = store.redeem(token, now=now + timedelta(minutes=30))

    assert result.ok
    assert result.view.user_id == 7
    assert result.view.token == token
    assert result.view.expires_at == now + timedelta(hours=1)
    assert fake_redis.sismember("rt:u:7", token)


def test_redeem_does_not_consume(store):
    token = store.create_for(1)
    assert store.redeem(token).ok
    assert store.redeem(token).ok


def test_tokens_are_unique_per_call(store):
    now = _now()
    assert store.create_for(1, now=now) != store.create_for(1, now=now)


def test_expired_token_reported_once(store, fake_redis):
    now = _now()
    token = store.create_for(3, now=now)

    # Exactly at expiry counts as expired.
    result = store.redeem(token, now=now + timedelta(hours=1))
    assert result.status is RedeemStatus.EXPIRED
    assert result.view.user_id == 3
    assert not fake_redis.exists(f"rt:{token}")
    assert not fake_redis.sismember("rt:u:3", token)

    assert store.redeem(token, now=now).status is RedeemStatus.NOT_FOUND


@pytest.mark.parametrize("token", ["", "unknown"])
def test_unknown_token(store, token):
    assert store.redeem(token).status is RedeemStatus.NOT_FOUND


def test_hash_outlives_expiry_by_grace(store, fake_redis):
    token = store.create_for(4)
    ttl = fake_redis.ttl(f"rt:{token}")
    # one hour of lifetime plus one day of grace
    assert 3600 < ttl <= 3600 + 86400


def test_revoke(store, fake_redis):
    token = store.create_for(5)
    store.revoke(token)
    assert store.redeem(token).status is RedeemStatus.NOT_FOUND
    assert fake_redis.scard("rt:u:5") == 0
    # Unknown and empty tokens are ignored.
    store.revoke(token)
    store.revoke("")


def test_revoke_all_for_user(store, fake_redis):
    mine = [store.create_for(8) for _ in range(3)]
    other = store.create_for(9)

    assert store.revoke_all_for_user(8) == 3

    assert all(store.redeem(t).status is RedeemStatus.NOT_FOUND for t in mine)
    assert store.redeem(other).ok
    assert not fake_redis.exists("rt:u:8")
    assert store.revoke_all_for_user(8) == 0


def test_purge_expired_is_left_to_redis(store):
    store.create_for(1, now=_now() - timedelta(days=1))
    assert store.purge_expired() == 0
