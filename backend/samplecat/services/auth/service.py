# samplecat/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from samplecat.models import User
from samplecat.services._shared.base import BaseService
from samplecat.services._shared.errors import (
    AccountDisabledError,
    AccountLockedError,
    AlreadyExistsError,
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    ServiceError,
    TokenExpiredError,
    violates,
)
from samplecat.services._shared.ports import (
    RedeemStatus,
    RefreshTokenStore,
    TokenProvider,
)
from samplecat.services.auth.dto import (
    AuthResultOut,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
)

log = logging.getLogger(__name__)

USERNAME_TAKEN = "Username already exists"
EMAIL_TAKEN = "Email already exists"


class AuthService(BaseService):
    """
    Authentication lifecycle: register, login, refresh and logout.

    Access tokens come from a :class:`TokenProvider`; refresh tokens are
    opaque strings kept by a :class:`RefreshTokenStore`. Refresh tokens are
    **not rotated**: a refresh returns the same string until it expires or
    is revoked.
    """

    def __init__(self, *, token_provider: TokenProvider, refresh_store: RefreshTokenStore) -> None:
        """
        :param token_provider: Adapter issuing and parsing access tokens.
        :param refresh_store: Persistence for refresh tokens.
        """
        super().__init__()
        self.tokens = token_provider
        self.refresh_store = refresh_store

    def _result(self, user: User, refresh_token: str) -> AuthResultOut:
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        access = self.tokens.issue(user.username, role=role, user_id=user.id)
        return AuthResultOut(
            access_token=access,
            refresh_token=refresh_token,
            id=user.id,
            username=user.username,
            email=user.email,
            role=role,
        )

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create an account and sign it in.

        The username is checked before the email, so a request duplicating
        both reports the username.

        :raises AlreadyExistsError: If the username or email is taken.
        """
        with self.rw_uow() as uow:
            if uow.users.exists_by_username(dto.username):
                raise AlreadyExistsError(USERNAME_TAKEN)
            if uow.users.exists_by_email(dto.email):
                raise AlreadyExistsError(EMAIL_TAKEN)

            try:
                user = User(username=dto.username, email=dto.email, full_name=dto.full_name)
                user.password = dto.password
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc

            try:
                uow.users.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration.
                if violates(exc, "uq_users_username"):
                    raise AlreadyExistsError(USERNAME_TAKEN) from exc
                if violates(exc, "uq_users_email"):
                    raise AlreadyExistsError(EMAIL_TAKEN) from exc
                raise

            refresh = self.refresh_store.create_for(user.id, now=self.now_utc())
            result = self._result(user, refresh)

        log.info("User registered", extra={"username": result.username, "user_id": result.id})
        return result

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Verify credentials and issue an access token plus a new refresh token.

        Order of checks: credentials, lock, enabled. A wrong password for an
        existing account increments its failure counter (locking it at the
        threshold) and that increment is committed even though the login
        fails.

        :raises InvalidCredentialsError: Unknown user or wrong password.
        :raises AccountLockedError: Too many consecutive failures.
        :raises AccountDisabledError: Account switched off.
        """
        failure: AuthenticationError

        with self.rw_uow() as uow:
            user = uow.users.get_by_username_or_email(dto.username_or_email, for_update=True)
            if user is None:
                failure = InvalidCredentialsError()
            elif not user.verify_password(dto.password):
                was_locked = user.is_locked
                user.increment_failed_login_attempts()
                if user.is_locked and not was_locked:
                    log.warning(
                        "Account locked after repeated login failures",
                        extra={"username": user.username, "user_id": user.id},
                    )
                failure = InvalidCredentialsError()
            elif user.is_locked:
                failure = AccountLockedError()
            elif not user.is_enabled:
                failure = AccountDisabledError()
            else:
                user.update_last_login(self.now_utc())
                user.reset_failed_login_attempts()
                uow.users.flush()
                refresh = self.refresh_store.create_for(user.id, now=self.now_utc())
                return self._result(user, refresh)

        # Raised outside the block so the counter update above is committed.
        raise failure

    # ------------------------------------------------------------------ #
    # Refresh (no rotation)
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AuthResultOut:
        """
        Exchange a refresh token for a new access token.

        The refresh token itself is returned unchanged. An expired token is
        deleted as part of the failed attempt.

        :raises TokenExpiredError: Token found but past its expiry.
        :raises InvalidTokenError: Token unknown or its user is gone.
        """
        result: AuthResultOut | None = None
        with self.rw_uow() as uow:
            redeemed = self.refresh_store.redeem(dto.refresh_token, now=self.now_utc())
            if redeemed.ok and redeemed.view is not None:
                user = uow.users.get(redeemed.view.user_id)
                if user is None:
                    self.refresh_store.revoke(dto.refresh_token)
                else:
                    result = self._result(user, redeemed.view.token)

        if redeemed.status is RedeemStatus.EXPIRED:
            raise TokenExpiredError()
        if result is None:
            raise InvalidTokenError()
        return result

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Revoke the refresh token. Unknown or missing tokens are ignored."""
        if not dto.refresh_token:
            return
        with self.rw_uow():
            self.refresh_store.revoke(dto.refresh_token)
