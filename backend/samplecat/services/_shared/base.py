# samplecat/services/_shared/base.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from samplecat.core import errors as api_errors
from samplecat.repositories.base import Pagination
from samplecat.services._shared.errors import (
    AccessDeniedError,
    AuthenticationError,
    NotFoundError,
    ServiceError,
)
from samplecat.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def now_utc() -> datetime:
    """Timezone-aware current time (patched by freezegun in tests)."""
    return datetime.now(UTC)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry request-scoped data into services.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared validation helpers (pagination, ownership).

    Notes
    -----
    - Services never touch the global session directly; they use a Unit of Work.
    - Entity rules (lockout threshold, field validation) live in the models.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level.
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    @staticmethod
    def now_utc() -> datetime:
        return now_utc()

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        sort: Iterable[str] | None = None,
    ) -> Pagination:
        """
        Build a Pagination value object, clamping ``limit`` to ``1..MAX_PAGE_LIMIT``.

        :param page: 1-based page number.
        :param limit: Page size.
        :param sort: Sort tokens like ``["-created_at", "name"]``.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = min(MAX_PAGE_LIMIT, max(1, int(limit)))
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor owns the resource.

        :raises AccessDeniedError: If ``actor_id`` differs from ``owner_id``.
        """
        if actor_id is None or int(actor_id) != int(owner_id):
            raise AccessDeniedError(msg) if msg else AccessDeniedError()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, (AuthenticationError, AccessDeniedError)):
            # → 401 Unauthorized (ownership failures included)
            return api_errors.Unauthorized(str(exc))

        # Any other ServiceError subclass → 400 Bad Request, message verbatim
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
