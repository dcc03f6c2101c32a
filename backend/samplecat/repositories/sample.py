"""Sample repository."""

from __future__ import annotations

from sqlalchemy.orm import joinedload

from samplecat.models.sample import Sample
from samplecat.repositories.base import BaseRepository, Page, Pagination


class SampleRepository(BaseRepository[Sample]):
    """Persistence for :class:`Sample`; listings default to newest first."""

    model = Sample

    def _sortable_fields(self):
        return {
            "id": Sample.id,
            "name": Sample.name,
            "created_at": Sample.created_at,
            "updated_at": Sample.updated_at,
        }

    def _default_sort(self) -> list[str]:
        return ["-created_at"]

    def _updatable_fields(self):
        return {"name", "description", "image_url", "image_id"}

    def _default_eagerload(self, stmt):
        """Owner is always rendered (``username``); load it in the same query."""
        return stmt.options(joinedload(Sample.owner))

    def list_for_user(self, user_id: int) -> list[Sample]:
        return self.list(filters={"user_id": user_id})

    def paginate_for_user(self, user_id: int, pagination: Pagination) -> Page[Sample]:
        return self.paginate(pagination, filters={"user_id": user_id})
