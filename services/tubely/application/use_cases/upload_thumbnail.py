from __future__ import annotations

import logging

from services.tubely.application.dto import UploadMediaCommand
from services.tubely.application.guards import (
    THUMBNAIL_MEDIA_TYPES,
    check_declared_size,
    extension_for,
    load_owned_video,
    require_media_type,
)
from services.tubely.application.interfaces import (
    KeyGenerator,
    ObjectStore,
    StagingStore,
    VideoRepository,
)
from services.tubely.domain.video import Video

logger = logging.getLogger(__name__)


class UploadThumbnailUseCase:
    def __init__(
        self,
        *,
        repository: VideoRepository,
        staging: StagingStore,
        keys: KeyGenerator,
        store: ObjectStore,
        bucket: str,
        max_bytes: int,
    ) -> None:
        self._repository = repository
        self._staging = staging
        self._keys = keys
        self._store = store
        self._bucket = bucket
        self._max_bytes = max_bytes

    def execute(self, command: UploadMediaCommand) -> Video:
        video = load_owned_video(self._repository, command.video_id, command.user_id)
        media_type = require_media_type(command.content_type, THUMBNAIL_MEDIA_TYPES)
        check_declared_size(command.declared_size, self._max_bytes)
        logger.info(f"uploading thumbnail for video {video.id} by user {command.user_id}")

        extension = extension_for(media_type)
        with self._staging.stage(
            command.stream, size_limit=self._max_bytes, suffix=f".{extension}"
        ) as staged:
            key = self._keys.generate(extension)
            self._store.put(self._bucket, key, staged, media_type)

        updated = video.with_thumbnail(self._store.public_url(self._bucket, key))
        self._repository.update(updated)
        return updated
