from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Union
from uuid import UUID

LOCATOR_SEPARATOR = ","


@dataclass(frozen=True)
class DirectLocator:
    url: str


@dataclass(frozen=True)
class StoredRef:
    bucket: str
    key: str


@dataclass(frozen=True)
class SignedLocator:
    url: str
    expires_at: datetime


VideoLocator = Union[DirectLocator, StoredRef, SignedLocator]


def serialize_locator(locator: VideoLocator | None) -> str | None:
    """Render a locator in the legacy single-column form kept by the record store."""
    if locator is None:
        return None
    if isinstance(locator, StoredRef):
        return f"{locator.bucket}{LOCATOR_SEPARATOR}{locator.key}"
    return locator.url


def parse_locator(raw: str | None) -> VideoLocator | None:
    if not raw:
        return None
    if "://" not in raw and LOCATOR_SEPARATOR in raw:
        bucket, _, key = raw.partition(LOCATOR_SEPARATOR)
        if bucket and key:
            return StoredRef(bucket=bucket, key=key)
    # Expiry is not persisted, so stored signed URLs read back as direct ones.
    return DirectLocator(url=raw)


@dataclass(frozen=True)
class Video:
    id: UUID
    user_id: UUID
    title: str
    created_at: datetime
    updated_at: datetime
    description: str = ""
    thumbnail_url: Optional[str] = None
    video_locator: Optional[VideoLocator] = None

    @property
    def video_url(self) -> str | None:
        return serialize_locator(self.video_locator)

    def with_thumbnail(self, url: str) -> "Video":
        return replace(self, thumbnail_url=url, updated_at=_now())

    def with_video_locator(self, locator: VideoLocator) -> "Video":
        return replace(self, video_locator=locator, updated_at=_now())


def _now() -> datetime:
    return datetime.now(timezone.utc)
