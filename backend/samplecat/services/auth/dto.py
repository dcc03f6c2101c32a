from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RegisterIn:
    username: str
    email: str
    password: str
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Login credentials.

    :param username_or_email: Matched against username (exact) or email.
    :param password: Plain text password.
    """

    username_or_email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Tokens plus a summary of the authenticated user.

    :param access_token: Signed, short-lived bearer token.
    :param refresh_token: Opaque token accepted by ``/auth/refresh``.
    """

    access_token: str
    refresh_token: str
    id: int
    username: str
    email: str
    role: str
