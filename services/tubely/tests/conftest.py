from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID, uuid4

import pytest

from services.tubely.domain.errors import RecordUpdateFailed, TransferFailed
from services.tubely.domain.media import MediaDescriptor, StreamDimensions
from services.tubely.domain.video import Video
from services.tubely.infrastructure.staging import (
    StagedArtifact,
    TempFileStagingStore,
)


class FakeRepository:
    def __init__(self, *videos: Video) -> None:
        self.videos: dict[UUID, Video] = {video.id: video for video in videos}
        self.updates: list[Video] = []
        self.fail_update = False

    def get(self, video_id: UUID) -> Video | None:
        return self.videos.get(video_id)

    def update(self, video: Video) -> None:
        if self.fail_update:
            raise RecordUpdateFailed()
        self.updates.append(video)
        self.videos[video.id] = video


class FakeStore:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, object]] = {}
        self.presigned: list[tuple[str, str, int]] = []
        self.fail_put = False

    def put(self, bucket, key, artifact, content_type) -> None:
        if self.fail_put:
            raise TransferFailed()
        artifact.rewind()
        self.objects[(bucket, key)] = {
            "content": artifact.file.read(),
            "content_type": content_type,
        }

    def public_url(self, bucket: str, key: str) -> str:
        return f"https://{bucket}.s3.us-east-1.amazonaws.com/{key}"

    def presign_get(self, bucket: str, key: str, expires_in_seconds: int) -> str:
        self.presigned.append((bucket, key, expires_in_seconds))
        return f"https://{bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in_seconds}&sig={len(self.presigned)}"


class FakeInspector:
    def __init__(self, width: int = 1920, height: int = 1080, error=None) -> None:
        self.descriptor = MediaDescriptor(
            streams=(StreamDimensions(width=width, height=height),)
        )
        self.error = error
        self.inspected: list[Path] = []

    def inspect(self, path: Path) -> MediaDescriptor:
        self.inspected.append(path)
        assert path.exists()
        if self.error is not None:
            raise self.error
        return self.descriptor


class FakeRemuxer:
    def __init__(self, error=None) -> None:
        self.error = error
        self.outputs: list[Path] = []

    def remux(self, path: Path) -> StagedArtifact:
        if self.error is not None:
            raise self.error
        destination = path.with_name(path.name + ".processing")
        destination.write_bytes(b"faststart:" + path.read_bytes())
        self.outputs.append(destination)
        return StagedArtifact(destination)


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def video(owner_id) -> Video:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Video(
        id=uuid4(),
        user_id=owner_id,
        title="Boots",
        description="A video about boots",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def repository(video) -> FakeRepository:
    return FakeRepository(video)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def staging(staging_dir) -> TempFileStagingStore:
    return TempFileStagingStore(staging_dir)


@pytest.fixture
def inspector() -> FakeInspector:
    return FakeInspector()


@pytest.fixture
def remuxer() -> FakeRemuxer:
    return FakeRemuxer()


@pytest.fixture
def make_inspector():
    return FakeInspector


@pytest.fixture
def make_remuxer():
    return FakeRemuxer
