"""
Unit tests for AuthService against the SQL refresh store and the JWT provider.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from samplecat.infra.db.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from samplecat.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from samplecat.models import MAX_FAILED_LOGIN_ATTEMPTS, RefreshToken, User
from samplecat.services._shared.errors import (
    AccountDisabledError,
    AccountLockedError,
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    ServiceError,
    TokenExpiredError,
)
from samplecat.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn
from samplecat.services.auth.service import AuthService
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import not_raises


@pytest.fixture
def tokens() -> JWTTokenProvider:
    return JWTTokenProvider()


@pytest.fixture
def store() -> SQLAlchemyRefreshTokenStore:
    return SQLAlchemyRefreshTokenStore(ttl=timedelta(days=7))


@pytest.fixture
def svc(app, db, session, tokens, store) -> AuthService:
    return AuthService(token_provider=tokens, refresh_store=store)


def _reload(session, user_id: int) -> User:
    session.expire_all()
    return session.get(User, user_id)


# ------------------------------------------------------------------ #
# Register
# ------------------------------------------------------------------ #


class TestRegister:
    def test_creates_user_and_refresh_token(self, svc, session, tokens):
        out = svc.register(RegisterIn("alice", "A@X.com", "password123", "Alice A"))

        assert out.username == "alice"
        assert out.email == "a@x.com"
        assert out.role == "USER"
        assert tokens.parse(out.access_token).subject == "alice"

        user = _reload(session, out.id)
        assert user.enabled and not user.account_locked
        assert user.verify_password("password123")
        row = session.query(RefreshToken).filter_by(token=out.refresh_token).one()
        assert row.user_id == out.id

    def test_username_checked_before_email(self, svc):
        UserFactory(username="bob", email="bob@example.com")
        with pytest.raises(AlreadyExistsError, match="Username already exists"):
            svc.register(RegisterIn("bob", "bob@example.com", "password123"))

    def test_duplicate_email(self, svc):
        UserFactory(username="carol", email="carol@example.com")
        with pytest.raises(AlreadyExistsError, match="Email already exists"):
            svc.register(RegisterIn("carol2", "CAROL@example.com", "password123"))

    def test_failure_leaves_no_rows(self, svc, session):
        UserFactory(username="dup")
        before = session.query(User).count()
        with pytest.raises(AlreadyExistsError):
            svc.register(RegisterIn("dup", "new@example.com", "password123"))
        assert session.query(User).count() == before


# ------------------------------------------------------------------ #
# Login
# ------------------------------------------------------------------ #


class TestLogin:
    def test_success_by_username_or_email(self, svc, session):
        user = UserFactory(username="erin", email="erin@example.com", failed_login_attempts=3)

        by_name = svc.login(LoginIn("erin", DEFAULT_PASSWORD))
        by_mail = svc.login(LoginIn("ERIN@example.com", DEFAULT_PASSWORD))

        assert by_name.id == by_mail.id == user.id
        assert by_name.refresh_token != by_mail.refresh_token
        reloaded = _reload(session, user.id)
        assert reloaded.failed_login_attempts == 0
        assert reloaded.last_login is not None

    def test_unknown_user_is_generic(self, svc):
        with pytest.raises(InvalidCredentialsError, match="Invalid username or password"):
            svc.login(LoginIn("ghost", DEFAULT_PASSWORD))

    def test_wrong_password_counts_and_commits(self, svc, session):
        user = UserFactory(username="frank")
        with pytest.raises(InvalidCredentialsError):
            svc.login(LoginIn("frank", "wrong-password"))
        assert _reload(session, user.id).failed_login_attempts == 1

    def test_locks_after_threshold(self, svc, session):
        user = UserFactory(username="gina")
        for _ in range(MAX_FAILED_LOGIN_ATTEMPTS):
            with pytest.raises(InvalidCredentialsError):
                svc.login(LoginIn("gina", "wrong-password"))

        assert _reload(session, user.id).account_locked is True
        # Correct password no longer helps.
        with pytest.raises(AccountLockedError, match="locked"):
            svc.login(LoginIn("gina", DEFAULT_PASSWORD))

    def test_disabled_account(self, svc):
        UserFactory(username="hank", enabled=False)
        with pytest.raises(AccountDisabledError, match="Account is disabled"):
            svc.login(LoginIn("hank", DEFAULT_PASSWORD))

    def test_lock_checked_before_enabled(self, svc):
        UserFactory(username="ivy", enabled=False, account_locked=True)
        with pytest.raises(AccountLockedError):
            svc.login(LoginIn("ivy", DEFAULT_PASSWORD))

    def test_success_commits_refresh_token(self, svc, session):
        user = UserFactory(username="jude")

        out = svc.login(LoginIn("jude", DEFAULT_PASSWORD))

        session.expire_all()
        row = session.query(RefreshToken).filter_by(token=out.refresh_token).one()
        assert row.user_id == user.id


# ------------------------------------------------------------------ #
# Refresh / Logout
# ------------------------------------------------------------------ #


class TestRefresh:
    def test_same_refresh_token_returned_twice(self, svc, tokens):
        user = UserFactory(username="jack")
        row = RefreshTokenFactory(user=user)
        token = row.token

        first = svc.refresh(RefreshIn(token))
        second = svc.refresh(RefreshIn(token))

        assert first.refresh_token == second.refresh_token == token
        assert tokens.parse(second.access_token).subject == "jack"

    def test_expired_token_is_deleted(self, svc, session):
        token = RefreshTokenFactory(expired=True).token

        with pytest.raises(TokenExpiredError, match="Token has expired"):
            svc.refresh(RefreshIn(token))
        assert session.query(RefreshToken).filter_by(token=token).count() == 0

        # Second attempt: gone, so merely invalid.
        with pytest.raises(InvalidTokenError) as excinfo:
            svc.refresh(RefreshIn(token))
        assert not isinstance(excinfo.value, TokenExpiredError)

    def test_expiry_boundary(self, svc, store):
        user = UserFactory()
        with freeze_time("2030-01-01 12:00:00"):
            with svc.rw_uow():
                token = store.create_for(user.id)
        with freeze_time("2030-01-08 11:59:59"):
            assert svc.refresh(RefreshIn(token)).refresh_token == token
        with freeze_time("2030-01-08 12:00:00"), pytest.raises(TokenExpiredError):
            svc.refresh(RefreshIn(token))

    def test_unknown_token(self, svc):
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            svc.refresh(RefreshIn("not-a-token"))


class TestLogout:
    def test_logout_revokes(self, svc, session):
        token = RefreshTokenFactory().token
        svc.logout(LogoutIn(token))
        assert session.query(RefreshToken).filter_by(token=token).count() == 0
        with pytest.raises(InvalidTokenError):
            svc.refresh(RefreshIn(token))

    @pytest.mark.parametrize("token", ["never-issued", "", None])
    def test_logout_is_idempotent(self, svc, token):
        with not_raises(ServiceError):
            svc.logout(LogoutIn(token))
            svc.logout(LogoutIn(token))


def test_tokens_survive_only_until_expiry(svc, tokens):
    """Access tokens carry typed claims and die at their own expiry."""
    user = UserFactory(username="kate")
    with freeze_time(datetime(2030, 5, 1, 8, 0, tzinfo=UTC)):
        out = svc.login(LoginIn("kate", DEFAULT_PASSWORD))
        claims = tokens.parse(out.access_token)
        assert claims.user_id == user.id
        assert claims.role == "USER"
        assert claims.expires_at - claims.issued_at == timedelta(hours=1)
    with freeze_time(datetime(2030, 5, 1, 9, 0, 1, tzinfo=UTC)), pytest.raises(TokenExpiredError):
        tokens.parse(out.access_token)
