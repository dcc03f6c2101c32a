from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended.exceptions import JWTExtendedException

from samplecat.services._shared.errors import InvalidTokenError, TokenExpiredError
from samplecat.services._shared.ports import AccessTokenClaims, SupportsUsername, TokenProvider


def _from_timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm and TTL (``JWT_ACCESS_TOKEN_EXPIRES``) come from
    the app config; the key is resolved once at startup by
    :func:`samplecat.core.extensions.resolve_signing_key`.

    .. note::
       Requires an active Flask app context.
    """

    def issue(self, subject: str, *, role: str | None = None, user_id: int | None = None) -> str:
        from flask_jwt_extended import create_access_token

        claims: dict[str, Any] = {}
        if role is not None:
            claims["role"] = role
        if user_id is not None:
            claims["uid"] = int(user_id)
        return cast(str, create_access_token(identity=subject, additional_claims=claims))

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry and return the raw payload.

        :raises TokenExpiredError: When the token is past ``exp``.
        :raises InvalidTokenError: For any other verification failure.
        """
        from flask_jwt_extended import decode_token

        if not token or not isinstance(token, str):
            raise InvalidTokenError()
        try:
            payload = cast(dict[str, Any], decode_token(token))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except (pyjwt.PyJWTError, JWTExtendedException, ValueError, KeyError) as exc:
            raise InvalidTokenError() from exc
        return payload

    def parse(self, token: str) -> AccessTokenClaims:
        payload = self.decode(token)
        if payload.get("type", "access") != "access":
            raise InvalidTokenError()
        try:
            claims = AccessTokenClaims(
                subject=str(payload["sub"]),
                issued_at=_from_timestamp(payload["iat"]),
                expires_at=_from_timestamp(payload["exp"]),
                role=payload.get("role"),
                user_id=int(payload["uid"]) if payload.get("uid") is not None else None,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc
        # Checked explicitly as well, independently of the library's leeway.
        if datetime.now(tz=UTC) >= claims.expires_at:
            raise TokenExpiredError()
        return claims

    def is_valid(self, token: str, user: SupportsUsername) -> bool:
        try:
            claims = self.parse(token)
        except InvalidTokenError:
            return False
        return claims.subject == user.username
