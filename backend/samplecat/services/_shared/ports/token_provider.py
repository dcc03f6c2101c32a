from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """
    Typed view over a verified access token.

    :ivar subject: Username the token was issued to (case-sensitive).
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    :ivar role: Role name at issuance, when present.
    :ivar user_id: Numeric user id at issuance, when present.
    """

    subject: str
    issued_at: datetime
    expires_at: datetime
    role: str | None = None
    user_id: int | None = None


class SupportsUsername(Protocol):
    username: str


class TokenProvider(Protocol):
    """Port for issuing and verifying signed access tokens."""

    def issue(self, subject: str, *, role: str | None = None, user_id: int | None = None) -> str:
        """Sign a token for ``subject`` valid for the configured TTL."""
        ...

    def parse(self, token: str) -> AccessTokenClaims:
        """
        Verify and decode ``token``.

        :raises TokenExpiredError: When ``now >= expires_at``.
        :raises InvalidTokenError: On bad signature or malformed structure.
        """
        ...

    def is_valid(self, token: str, user: SupportsUsername) -> bool:
        """``True`` iff ``parse`` succeeds and the subject equals ``user.username``."""
        ...
