from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.exc import SQLAlchemyError

from services.tubely.application.interfaces import VideoRepository
from services.tubely.domain.errors import NotFound, RecordUpdateFailed
from services.tubely.domain.video import Video, parse_locator
from services.tubely.infrastructure.db import Base

logger = logging.getLogger(__name__)


class VideoRecord(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    thumbnail_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


def _to_domain(record: VideoRecord) -> Video:
    return Video(
        id=UUID(record.id),
        user_id=UUID(record.user_id),
        title=record.title,
        description=record.description or "",
        created_at=record.created_at,
        updated_at=record.updated_at,
        thumbnail_url=record.thumbnail_url,
        video_locator=parse_locator(record.video_url),
    )


class SqlVideoRepository(VideoRepository):
    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    def create(self, video: Video) -> Video:
        record = VideoRecord(
            id=str(video.id),
            user_id=str(video.user_id),
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail_url,
            video_url=video.video_url,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )
        with self._session_factory() as db:
            db.add(record)
            db.commit()
        return video

    def get(self, video_id: UUID) -> Video | None:
        try:
            with self._session_factory() as db:
                record = db.get(VideoRecord, str(video_id))
                if record is None:
                    return None
                return _to_domain(record)
        except SQLAlchemyError as exc:
            logger.error(f"Failed to load video {video_id}: {exc}")
            raise RecordUpdateFailed("Could not load video") from exc

    def update(self, video: Video) -> None:
        try:
            with self._session_factory() as db:
                record = db.get(VideoRecord, str(video.id))
                if record is None:
                    raise NotFound()
                record.title = video.title
                record.description = video.description
                record.thumbnail_url = video.thumbnail_url
                record.video_url = video.video_url
                record.updated_at = video.updated_at
                db.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Failed to update video {video.id}: {exc}")
            raise RecordUpdateFailed() from exc
