"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from samplecat.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    paginate_select,
)
from samplecat.repositories.refresh_token import RefreshTokenRepository
from samplecat.repositories.sample import SampleRepository
from samplecat.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    # Domain
    "RefreshTokenRepository",
    "SampleRepository",
    "UserRepository",
]
