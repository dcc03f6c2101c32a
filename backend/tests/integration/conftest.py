"""Fixtures for HTTP-level tests."""

from __future__ import annotations

import pytest

from samplecat.core.rate_limit import RateLimitPolicy
from tests.factories.user import UserFactory
from tests.helpers.utils import bearer


@pytest.fixture
def issue_token(app):
    """Mint an access token for a persisted user without spending auth budget."""

    def _issue(user) -> str:
        return app.extensions["token_provider"].issue(
            user.username, role=user.role.value, user_id=user.id
        )

    return _issue


@pytest.fixture
def user(session):
    return UserFactory()


@pytest.fixture
def auth_headers(user, issue_token) -> dict[str, str]:
    return bearer(issue_token(user))


@pytest.fixture
def tight_policies(app):
    """Shrink both buckets to two requests per minute for the test."""
    original = app.extensions["rate_limit_policies"]
    app.extensions["rate_limit_policies"] = (
        RateLimitPolicy("standard", 2, 60),
        RateLimitPolicy("auth", 2, 60),
    )
    yield
    app.extensions["rate_limit_policies"] = original
