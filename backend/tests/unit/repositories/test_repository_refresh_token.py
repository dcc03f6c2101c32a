"""Tests for RefreshTokenRepository bulk operations."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from samplecat.repositories import RefreshTokenRepository
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture
def repo(session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session=session)


def test_get_by_token(repo):
    row = RefreshTokenFactory()
    assert repo.get_by_token(row.token).id == row.id
    assert repo.get_by_token("missing") is None


def test_delete_by_token_is_idempotent(repo):
    row = RefreshTokenFactory()
    assert repo.delete_by_token(row.token) == 1
    assert repo.delete_by_token(row.token) == 0
    assert repo.get_by_token(row.token) is None


def test_delete_for_user_only_touches_that_user(repo):
    user = UserFactory()
    RefreshTokenFactory.create_batch(3, user=user)
    other = RefreshTokenFactory()

    assert repo.delete_for_user(user.id) == 3
    assert repo.list_for_user(user.id) == []
    assert repo.get_by_token(other.token) is not None


def test_delete_expired(repo):
    stale = [t.token for t in RefreshTokenFactory.create_batch(2, expired=True)]
    live = RefreshTokenFactory().token

    assert repo.delete_expired(datetime.now(UTC)) == 2
    assert all(repo.get_by_token(t) is None for t in stale)
    assert repo.get_by_token(live) is not None
