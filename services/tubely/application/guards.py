from __future__ import annotations

import logging
from typing import Collection
from uuid import UUID

from services.tubely.application.interfaces import VideoRepository
from services.tubely.domain.errors import (
    InvalidInput,
    NotFound,
    Unauthorized,
    UploadTooLarge,
)
from services.tubely.domain.video import Video

logger = logging.getLogger(__name__)

THUMBNAIL_MEDIA_TYPES = frozenset({"image/jpeg", "image/png"})
VIDEO_MEDIA_TYPES = frozenset({"video/mp4"})


def load_owned_video(
    repository: VideoRepository, video_id: UUID, user_id: UUID
) -> Video:
    video = repository.get(video_id)
    if video is None:
        raise NotFound()
    if video.user_id != user_id:
        logger.warning(f"User {user_id} denied access to video {video_id}")
        raise Unauthorized()
    return video


def require_media_type(content_type: str | None, allowed: Collection[str]) -> str:
    """Return the bare media type of a Content-Type header if it is allowed."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not media_type or "/" not in media_type:
        raise InvalidInput("Could not get media type")
    if media_type not in allowed:
        raise InvalidInput("Invalid file type")
    return media_type


def check_declared_size(declared_size: int | None, limit: int) -> None:
    if declared_size is not None and declared_size > limit:
        raise UploadTooLarge(f"Upload exceeds the {limit} byte limit")


def extension_for(media_type: str) -> str:
    return media_type.split("/", 1)[1]
