# samplecat/services/samples/service.py
from __future__ import annotations

import logging
from typing import Any

from samplecat.models.sample import Sample
from samplecat.repositories.base import Page
from samplecat.services._shared.base import BaseService
from samplecat.services._shared.dto import ImageUpload, PageMeta
from samplecat.services._shared.errors import NotFoundError, ServiceError
from samplecat.services._shared.ports import ImageStore, StoredImage
from samplecat.services.samples.dto import (
    SampleCreateIn,
    SampleListIn,
    SampleListOut,
    SampleOut,
    SampleUpdateIn,
)

log = logging.getLogger(__name__)


def to_sample_out(row: Sample) -> SampleOut:
    return SampleOut(
        id=row.id,
        name=row.name,
        description=row.description,
        image_url=row.image_url,
        user_id=row.user_id,
        username=row.owner.username,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_list_out(page: Page[Sample]) -> SampleListOut:
    return SampleListOut(
        items=[to_sample_out(r) for r in page.items],
        meta=PageMeta.build(page=page.page, limit=page.limit, total=page.total),
    )


class SampleService(BaseService):
    """
    Catalog of image-attached samples.

    Any authenticated user can read every sample; only the owner may update
    or delete one (:class:`AccessDeniedError` otherwise). Images follow the
    same upload-first, delete-after-commit rule as profile pictures.
    """

    def __init__(self, *, image_store: ImageStore, image_folder: str = "samplecat") -> None:
        super().__init__()
        self.images = image_store
        self.folder = image_folder.strip("/")

    def _upload(self, image: ImageUpload | None) -> StoredImage | None:
        if image is None:
            return None
        return self.images.upload(image.data, folder=self.folder, content_type=image.content_type)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, dto: SampleCreateIn) -> SampleOut:
        """
        :raises NotFoundError: When the actor no longer exists.
        :raises ImageUploadError: When the image cannot be stored.
        """
        uploaded = self._upload(dto.image)
        try:
            with self.rw_uow() as uow:
                if uow.users.get(dto.actor_id) is None:
                    raise NotFoundError("User", dto.actor_id)
                try:
                    row = Sample(
                        name=dto.name,
                        description=dto.description,
                        image_url=uploaded.url if uploaded else None,
                        image_id=uploaded.image_id if uploaded else None,
                        user_id=dto.actor_id,
                    )
                except ValueError as exc:
                    raise ServiceError(str(exc)) from exc
                uow.samples.add(row)
                # Reload with the owner joined for the projection.
                out = to_sample_out(uow.samples.get(row.id) or row)
        except Exception:
            if uploaded is not None:
                self.images.delete(uploaded.image_id)
            raise
        log.info("Sample created", extra={"user_id": dto.actor_id})
        return out

    def update(self, dto: SampleUpdateIn) -> SampleOut:
        """
        :raises NotFoundError: When the sample does not exist.
        :raises AccessDeniedError: When the actor is not the owner.
        """
        # Ownership is checked before anything is uploaded.
        with self.ro_uow() as uow:
            current = uow.samples.get(dto.sample_id)
            if current is None:
                raise NotFoundError("Sample", dto.sample_id)
            self.ensure_owner(dto.actor_id, current.user_id)

        uploaded = self._upload(dto.image)
        old_image_id: str | None = None
        try:
            with self.rw_uow() as uow:
                row = uow.samples.get(dto.sample_id)
                if row is None:
                    raise NotFoundError("Sample", dto.sample_id)
                self.ensure_owner(dto.actor_id, row.user_id)

                changes: dict[str, Any] = {}
                if dto.name is not None:
                    changes["name"] = dto.name
                if dto.description is not None:
                    changes["description"] = dto.description
                if uploaded is not None:
                    old_image_id = row.image_id
                    changes["image_url"] = uploaded.url
                    changes["image_id"] = uploaded.image_id
                try:
                    uow.samples.assign_updates(row, changes)
                except ValueError as exc:
                    raise ServiceError(str(exc)) from exc
                out = to_sample_out(row)
        except Exception:
            if uploaded is not None:
                self.images.delete(uploaded.image_id)
            raise

        if old_image_id:
            self.images.delete(old_image_id)
        return out

    def delete(self, *, actor_id: int, sample_id: int) -> None:
        """
        :raises NotFoundError: When the sample does not exist.
        :raises AccessDeniedError: When the actor is not the owner.
        """
        with self.rw_uow() as uow:
            row = uow.samples.get(sample_id)
            if row is None:
                raise NotFoundError("Sample", sample_id)
            self.ensure_owner(actor_id, row.user_id)
            image_id = row.image_id
            uow.samples.delete(row)

        if image_id:
            self.images.delete(image_id)
        log.info("Sample deleted", extra={"user_id": actor_id})

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get(self, sample_id: int) -> SampleOut:
        """
        :raises NotFoundError: When the sample does not exist.
        """
        with self.ro_uow() as uow:
            row = uow.samples.get(sample_id)
            if row is None:
                raise NotFoundError("Sample", sample_id)
            return to_sample_out(row)

    def list_all(self, dto: SampleListIn) -> SampleListOut:
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        with self.ro_uow() as uow:
            return _to_list_out(uow.samples.paginate(pagination))

    def list_mine(self, actor_id: int) -> list[SampleOut]:
        with self.ro_uow() as uow:
            return [to_sample_out(r) for r in uow.samples.list_for_user(actor_id)]

    def list_by_user(self, user_id: int, dto: SampleListIn) -> SampleListOut:
        """
        :raises NotFoundError: When the user does not exist.
        """
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        with self.ro_uow() as uow:
            if not uow.users.exists(id=user_id):
                raise NotFoundError("User", user_id)
            return _to_list_out(uow.samples.paginate_for_user(user_id, pagination))
