from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from samplecat.services._shared.dto import ImageUpload, PageMeta


@dataclass(frozen=True, slots=True)
class SampleOut:
    """
    Public projection of a sample.

    :param id: Primary key.
    :param name: Display name.
    :param description: Optional free text.
    :param image_url: Public URL of the attached image.
    :param user_id: Owner id.
    :param username: Owner username.
    :param created_at: Creation time.
    :param updated_at: Last update time.
    """

    id: int
    name: str
    description: str | None
    image_url: str | None
    user_id: int
    username: str
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True, slots=True)
class SampleCreateIn:
    actor_id: int
    name: str
    description: str | None = None
    image: ImageUpload | None = None


@dataclass(frozen=True, slots=True)
class SampleUpdateIn:
    """Fields left as ``None`` keep their current value."""

    actor_id: int
    sample_id: int
    name: str | None = None
    description: str | None = None
    image: ImageUpload | None = None


@dataclass(frozen=True, slots=True)
class SampleListIn:
    page: int = 1
    limit: int = 20
    sort: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SampleListOut:
    items: list[SampleOut]
    meta: PageMeta
