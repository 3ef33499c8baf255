from __future__ import annotations

import logging
from contextlib import ExitStack

from services.tubely.application.dto import UploadMediaCommand
from services.tubely.application.guards import (
    VIDEO_MEDIA_TYPES,
    check_declared_size,
    extension_for,
    load_owned_video,
    require_media_type,
)
from services.tubely.application.interfaces import (
    KeyGenerator,
    MediaInspector,
    ObjectStore,
    Remuxer,
    StagingStore,
    VideoRepository,
)
from services.tubely.application.locators import LocatorResolver
from services.tubely.domain.media import classify_aspect
from services.tubely.domain.video import StoredRef, Video

logger = logging.getLogger(__name__)


class UploadVideoUseCase:
    """Stage, inspect, fast-start remux and store an MP4 for a video record.

    Every staged file is registered for deletion as soon as it exists, so
    both the upload and its remuxed copy are gone before this returns or
    raises. An object stored before a failed record update is left in the
    bucket.
    """

    def __init__(
        self,
        *,
        repository: VideoRepository,
        staging: StagingStore,
        inspector: MediaInspector,
        remuxer: Remuxer,
        keys: KeyGenerator,
        store: ObjectStore,
        resolver: LocatorResolver,
        bucket: str,
        max_bytes: int,
    ) -> None:
        self._repository = repository
        self._staging = staging
        self._inspector = inspector
        self._remuxer = remuxer
        self._keys = keys
        self._store = store
        self._resolver = resolver
        self._bucket = bucket
        self._max_bytes = max_bytes

    def execute(self, command: UploadMediaCommand) -> Video:
        video = load_owned_video(self._repository, command.video_id, command.user_id)
        media_type = require_media_type(command.content_type, VIDEO_MEDIA_TYPES)
        check_declared_size(command.declared_size, self._max_bytes)
        logger.info(f"uploading video {video.id} by user {command.user_id}")

        extension = extension_for(media_type)
        with ExitStack() as cleanup:
            staged = cleanup.enter_context(
                self._staging.stage(
                    command.stream, size_limit=self._max_bytes, suffix=f".{extension}"
                )
            )
            descriptor = self._inspector.inspect(staged.path)
            stream = descriptor.primary_stream
            aspect = classify_aspect(stream.width, stream.height)
            processed = cleanup.enter_context(self._remuxer.remux(staged.path))
            key = self._keys.generate(extension, aspect)
            logger.info(
                f"video {video.id} is {stream.width}x{stream.height} ({aspect.value}), storing as {key}"
            )
            self._store.put(self._bucket, key, processed, media_type)

        updated = video.with_video_locator(StoredRef(bucket=self._bucket, key=key))
        self._repository.update(updated)
        return self._resolver.resolve_video(updated)
