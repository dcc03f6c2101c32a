"""
samplecat.services._shared.ports
================================

*Ports* (hexagonal interfaces) the service layer depends on. Concrete
adapters live under :mod:`samplecat.infra`; lightweight in-memory doubles
live next to their port.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` and the typed :class:`~.AccessTokenClaims`.
- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.RedeemResult`,
    :class:`~.RefreshTokenView` and an in-memory implementation.
- :mod:`image_store`:
    :class:`~.ImageStore` for sample and profile pictures.
"""

from __future__ import annotations

from .image_store import (
    DisabledImageStore,
    ImageStore,
    InMemoryImageStore,
    StoredImage,
    new_image_key,
)
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RedeemResult,
    RedeemStatus,
    RefreshTokenStore,
    RefreshTokenView,
    new_refresh_token,
)
from .token_provider import AccessTokenClaims, SupportsUsername, TokenProvider

__all__ = [
    "AccessTokenClaims",
    "DisabledImageStore",
    "ImageStore",
    "InMemoryImageStore",
    "InMemoryRefreshTokenStore",
    "RedeemResult",
    "RedeemStatus",
    "RefreshTokenStore",
    "RefreshTokenView",
    "StoredImage",
    "SupportsUsername",
    "TokenProvider",
    "new_image_key",
    "new_refresh_token",
]
