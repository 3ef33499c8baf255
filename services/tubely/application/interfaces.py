from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol
from uuid import UUID

if TYPE_CHECKING:
    from services.tubely.domain.media import AspectBucket, MediaDescriptor
    from services.tubely.domain.video import Video


class Artifact(Protocol):
    """A staged local file that can be re-read and must be deleted by its owner."""

    path: Path

    @property
    def file(self) -> BinaryIO: ...

    def rewind(self) -> None: ...

    def delete(self) -> None: ...

    def __enter__(self) -> "Artifact": ...

    def __exit__(self, *exc_info) -> None: ...


class StagingStore(Protocol):
    def stage(
        self, stream: BinaryIO, *, size_limit: int, suffix: str = ""
    ) -> "Artifact": ...


class MediaInspector(Protocol):
    def inspect(self, path: Path) -> "MediaDescriptor": ...


class Remuxer(Protocol):
    def remux(self, path: Path) -> "Artifact": ...


class KeyGenerator(Protocol):
    def generate(
        self, extension: str, bucket: "AspectBucket" | None = None
    ) -> str: ...


class ObjectStore(Protocol):
    def put(
        self, bucket: str, key: str, artifact: "Artifact", content_type: str
    ) -> None: ...

    def public_url(self, bucket: str, key: str) -> str: ...

    def presign_get(self, bucket: str, key: str, expires_in_seconds: int) -> str: ...


class VideoRepository(Protocol):
    def get(self, video_id: UUID) -> "Video" | None: ...

    def update(self, video: "Video") -> None: ...
