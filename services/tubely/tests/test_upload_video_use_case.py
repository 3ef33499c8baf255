from __future__ import annotations

import io
import re
from uuid import uuid4

import pytest

from services.tubely.application.dto import UploadMediaCommand
from services.tubely.application.locators import LocatorResolver
from services.tubely.application.use_cases import UploadVideoUseCase
from services.tubely.domain.errors import (
    InspectionFailed,
    InvalidInput,
    NotFound,
    RecordUpdateFailed,
    RemuxFailed,
    StagingFailed,
    TransferFailed,
    Unauthorized,
    UploadTooLarge,
)
from services.tubely.domain.video import SignedLocator
from services.tubely.infrastructure.ids import RandomKeyGenerator
from services.tubely.infrastructure.probe import parse_probe_output

BUCKET = "tubely-bucket"


class _EmptyProbeInspector:
    def inspect(self, path):
        return parse_probe_output(b'{"streams": []}')


def _use_case(repository, staging, inspector, remuxer, store, *, max_bytes=1024):
    return UploadVideoUseCase(
        repository=repository,
        staging=staging,
        inspector=inspector,
        remuxer=remuxer,
        keys=RandomKeyGenerator(),
        store=store,
        resolver=LocatorResolver(store=store, repository=repository),
        bucket=BUCKET,
        max_bytes=max_bytes,
    )


def _command(video, user_id=None, content_type="video/mp4", payload=b"mp4 bytes"):
    return UploadMediaCommand(
        video_id=video.id,
        user_id=user_id or video.user_id,
        content_type=content_type,
        stream=io.BytesIO(payload),
        declared_size=len(payload),
    )


def test_landscape_upload_end_to_end(
    repository, staging, staging_dir, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    result = use_case.execute(_command(video))

    [(bucket, key)] = store.objects
    assert bucket == BUCKET
    assert re.fullmatch(r"landscape/[A-Za-z0-9_-]{43}\.mp4", key)
    assert store.objects[(bucket, key)] == {
        "content": b"faststart:mp4 bytes",
        "content_type": "video/mp4",
    }
    stored_ref, signed = repository.updates
    assert stored_ref.video_url == f"{BUCKET},{key}"
    assert isinstance(signed.video_locator, SignedLocator)
    assert store.presigned == [(BUCKET, key, 300)]
    assert result.video_url == signed.video_url
    assert repository.videos[video.id].video_url == signed.video_url
    assert list(staging_dir.iterdir()) == []


@pytest.mark.parametrize(
    "width, height, prefix",
    [(1080, 1920, "portrait/"), (1000, 563, "other/")],
)
def test_key_prefix_follows_aspect(
    repository, staging, remuxer, store, video, make_inspector, width, height, prefix
):
    use_case = _use_case(
        repository, staging, make_inspector(width, height), remuxer, store
    )

    use_case.execute(_command(video))

    [(_, key)] = store.objects
    assert key.startswith(prefix)


def test_rejects_non_owner_before_any_side_effect(
    repository, staging, staging_dir, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    with pytest.raises(Unauthorized):
        use_case.execute(_command(video, user_id=uuid4()))

    assert repository.updates == []
    assert store.objects == {}
    assert store.presigned == []
    assert list(staging_dir.iterdir()) == []


def test_unknown_video_is_not_found(
    repository, staging, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store)
    command = UploadMediaCommand(
        video_id=uuid4(),
        user_id=video.user_id,
        content_type="video/mp4",
        stream=io.BytesIO(b"x"),
    )

    with pytest.raises(NotFound):
        use_case.execute(command)


@pytest.mark.parametrize(
    "content_type", ["video/webm", "image/png", "", "application/octet-stream"]
)
def test_rejects_content_type_before_staging(
    repository, staging, staging_dir, inspector, remuxer, store, video, content_type
):
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    with pytest.raises(InvalidInput):
        use_case.execute(_command(video, content_type=content_type))

    assert list(staging_dir.iterdir()) == []
    assert inspector.inspected == []


def test_accepts_content_type_parameters(
    repository, staging, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    use_case.execute(_command(video, content_type="video/mp4; codecs=avc1"))

    [(_, key)] = store.objects
    assert key.endswith(".mp4")


def test_rejects_declared_size_over_limit(
    repository, staging, staging_dir, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store, max_bytes=4)

    with pytest.raises(UploadTooLarge):
        use_case.execute(_command(video))

    assert list(staging_dir.iterdir()) == []


def test_undeclared_oversize_stream_fails_staging(
    repository, staging, staging_dir, inspector, remuxer, store, video
):
    use_case = _use_case(repository, staging, inspector, remuxer, store, max_bytes=4)
    command = UploadMediaCommand(
        video_id=video.id,
        user_id=video.user_id,
        content_type="video/mp4",
        stream=io.BytesIO(b"too many bytes"),
    )

    with pytest.raises(StagingFailed):
        use_case.execute(command)

    assert list(staging_dir.iterdir()) == []


@pytest.mark.parametrize(
    "failure",
    ["inspect", "empty_streams", "remux", "transfer", "record_update"],
)
def test_failures_leave_no_staged_files(
    repository,
    staging,
    staging_dir,
    remuxer,
    store,
    video,
    make_inspector,
    make_remuxer,
    failure,
):
    inspector = make_inspector()
    expected = {
        "inspect": InspectionFailed,
        "empty_streams": InspectionFailed,
        "remux": RemuxFailed,
        "transfer": TransferFailed,
        "record_update": RecordUpdateFailed,
    }[failure]
    if failure == "inspect":
        inspector = make_inspector(error=InspectionFailed())
    if failure == "empty_streams":
        inspector = _EmptyProbeInspector()
    if failure == "remux":
        remuxer = make_remuxer(error=RemuxFailed())
    if failure == "transfer":
        store.fail_put = True
    if failure == "record_update":
        repository.fail_update = True
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    with pytest.raises(expected):
        use_case.execute(_command(video))

    assert list(staging_dir.iterdir()) == []
    assert repository.videos[video.id].video_url is None


def test_record_update_failure_leaves_object_in_storage(
    repository, staging, inspector, remuxer, store, video
):
    repository.fail_update = True
    use_case = _use_case(repository, staging, inspector, remuxer, store)

    with pytest.raises(RecordUpdateFailed):
        use_case.execute(_command(video))

    assert len(store.objects) == 1
    assert store.presigned == []
