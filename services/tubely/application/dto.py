from dataclasses import dataclass
from typing import BinaryIO
from uuid import UUID


@dataclass(frozen=True)
class UploadMediaCommand:
    video_id: UUID
    user_id: UUID
    content_type: str
    stream: BinaryIO
    declared_size: int | None = None


@dataclass(frozen=True)
class GetVideoCommand:
    video_id: UUID
    user_id: UUID
