"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from samplecat.repositories import (
        RefreshTokenRepository,
        SampleRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    Transactional boundary for one catalog use case.

    Writers commit when the block exits cleanly; readers never commit. A
    refresh-token store backed by the same database joins the transaction,
    so a registration writes the user and its first token atomically.
    """

    users: UserRepository
    samples: SampleRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
