from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from samplecat.services._shared.errors import ImageUploadError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredImage:
    """
    Location of an uploaded image.

    :ivar url: Public URL clients can fetch.
    :ivar image_id: Store-side key used to delete it later.
    """

    url: str
    image_id: str


def new_image_key(folder: str) -> str:
    """Return ``<folder>/<random hex>``; the client filename is never used."""
    return f"{folder.strip('/')}/{uuid4().hex}"


class ImageStore(Protocol):
    """Opaque external image host."""

    def upload(
        self,
        data: bytes,
        *,
        folder: str,
        content_type: str | None = None,
    ) -> StoredImage:
        """
        Store ``data`` under ``folder``.

        :raises ImageUploadError: When the host rejects the upload.
        """
        ...

    def delete(self, image_id: str) -> None:
        """Best-effort removal: failures are logged, never raised."""
        ...


class InMemoryImageStore(ImageStore):
    """Keeps uploads in a dict. Used by tests and for local runs."""

    base_url = "memory://images"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []

    def upload(self, data: bytes, *, folder: str, content_type: str | None = None) -> StoredImage:
        if not data:
            raise ImageUploadError("Failed to upload file: empty file")
        key = new_image_key(folder)
        with self._lock:
            self.objects[key] = data
        return StoredImage(url=f"{self.base_url}/{key}", image_id=key)

    def delete(self, image_id: str) -> None:
        with self._lock:
            self.objects.pop(image_id, None)
            self.deleted.append(image_id)


class DisabledImageStore(ImageStore):
    """Installed when no bucket is configured; uploads fail, deletes no-op."""

    def upload(self, data: bytes, *, folder: str, content_type: str | None = None) -> StoredImage:
        raise ImageUploadError("Failed to upload file: image storage is not configured")

    def delete(self, image_id: str) -> None:
        log.warning("Image storage is not configured; skipping delete", extra={"image_id": image_id})
