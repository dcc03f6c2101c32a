"""Unit tests for the Flask-JWT-Extended token provider."""

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import jwt as pyjwt
import pytest
from freezegun import freeze_time

from samplecat.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from samplecat.services._shared.errors import InvalidTokenError, TokenExpiredError


@pytest.fixture
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_issue_and_parse(provider):
    with freeze_time("2031-03-01 10:00:00"):
        token = provider.issue("olga", role="ADMIN", user_id=12)
        claims = provider.parse(token)

    assert claims.subject == "olga"
    assert claims.role == "ADMIN"
    assert claims.user_id == 12
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)


def test_expiry_is_exclusive(provider):
    with freeze_time("2031-03-01 10:00:00"):
        token = provider.issue("olga")
    with freeze_time("2031-03-01 10:59:59"):
        assert provider.parse(token).subject == "olga"
    with freeze_time("2031-03-01 11:00:00"), pytest.raises(TokenExpiredError):
        provider.parse(token)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed(provider, token):
    with pytest.raises(InvalidTokenError) as excinfo:
        provider.parse(token)
    assert not isinstance(excinfo.value, TokenExpiredError)


def test_tampered_signature(provider):
    token = provider.issue("olga")
    head, body, sig = token.split(".")
    forged = ".".join([head, body, sig[::-1]])
    with pytest.raises(InvalidTokenError):
        provider.parse(forged)


def test_foreign_key_rejected(provider):
    foreign = pyjwt.encode(
        {"sub": "olga", "iat": 0, "exp": 4102444800, "type": "access"},
        "another-key-that-is-at-least-thirty-two-bytes",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        provider.parse(foreign)


def test_is_valid_checks_subject(provider):
    token = provider.issue("olga")
    assert provider.is_valid(token, SimpleNamespace(username="olga"))
    assert not provider.is_valid(token, SimpleNamespace(username="pavel"))
    assert not provider.is_valid("garbage", SimpleNamespace(username="olga"))
