"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They serve as stable contracts between repositories, domain models,
adapters and application services.

The translation to HTTP responses is handled by
``samplecat/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g. ``'uq_users_email'``).

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports ``table.column``.
    Both forms are accepted.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # uq_<table>_<column> -> "<table>.<column>"
    parts = constraint_name.lower().split("_", 2)
    if len(parts) == 3 and parts[0] == "uq":
        return f"{parts[1]}.{parts[2]}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Unmapped subclasses surface as 400 with their message verbatim.
    """


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g. ``"User"``).
    :type entity: str
    :param key: Identifier or search key (kept for logs, not shown to clients).
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found"


class AlreadyExistsError(ServiceError):
    """Raised when a unique natural key (username, email) is already taken."""


class ImageUploadError(ServiceError):
    """Raised when the image store rejects an upload."""


class AccessDeniedError(ServiceError):
    """Raised when the actor does not own the resource it is acting on."""

    def __init__(self, message: str = "You don't have permission to access this resource") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for every failure that maps to *401 Unauthorized*."""

    default_message = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """Unknown user or wrong password; never says which."""

    default_message = "Invalid username or password"


class AccountLockedError(AuthenticationError):
    default_message = "Account is locked due to multiple failed login attempts"


class AccountDisabledError(AuthenticationError):
    default_message = "Account is disabled"


class InvalidTokenError(AuthenticationError):
    """Bad signature, malformed structure, unknown refresh token."""

    default_message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    """The token was well-formed but its expiry has passed."""

    default_message = "Token has expired"
