from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from services.tubely.application.interfaces import ObjectStore, VideoRepository
from services.tubely.domain.video import (
    DirectLocator,
    SignedLocator,
    StoredRef,
    Video,
    VideoLocator,
)

logger = logging.getLogger(__name__)

DIRECT = "direct"
SIGNED = "signed"


class LocatorResolver:
    """Turns a stored ``bucket,key`` reference into a client-usable URL.

    In ``signed`` mode every resolution mints a fresh pre-signed URL and
    writes it back to the record, so the stored form changes from the
    bucket/key reference to a URL. ``direct`` mode builds a public URL and
    leaves the record untouched.
    """

    def __init__(
        self,
        *,
        store: ObjectStore,
        repository: VideoRepository,
        mode: str = SIGNED,
        ttl: timedelta = timedelta(minutes=5),
    ) -> None:
        if mode not in (DIRECT, SIGNED):
            raise ValueError(f"Unknown locator mode: {mode}")
        self._store = store
        self._repository = repository
        self._mode = mode
        self._ttl = ttl

    def resolve(self, ref: StoredRef) -> VideoLocator:
        if self._mode == DIRECT:
            return DirectLocator(url=self._store.public_url(ref.bucket, ref.key))
        expires_at = datetime.now(timezone.utc) + self._ttl
        url = self._store.presign_get(
            ref.bucket, ref.key, int(self._ttl.total_seconds())
        )
        return SignedLocator(url=url, expires_at=expires_at)

    def resolve_video(self, video: Video) -> Video:
        if not isinstance(video.video_locator, StoredRef):
            return video
        locator = self.resolve(video.video_locator)
        if self._mode == DIRECT:
            return replace(video, video_locator=locator)
        resolved = video.with_video_locator(locator)
        logger.info(f"Persisting signed URL for video {video.id}")
        self._repository.update(resolved)
        return resolved
