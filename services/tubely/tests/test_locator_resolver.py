from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from services.tubely.application.locators import LocatorResolver
from services.tubely.domain.errors import SigningFailed
from services.tubely.domain.video import (
    DirectLocator,
    SignedLocator,
    StoredRef,
    parse_locator,
    serialize_locator,
)


def test_direct_mode_builds_public_url_without_writing(repository, store, video):
    resolver = LocatorResolver(store=store, repository=repository, mode="direct")
    stored = video.with_video_locator(StoredRef("tubely-bucket", "landscape/abc.mp4"))

    resolved = resolver.resolve_video(stored)

    assert resolved.video_locator == DirectLocator(
        url="https://tubely-bucket.s3.us-east-1.amazonaws.com/landscape/abc.mp4"
    )
    assert repository.updates == []
    assert store.presigned == []


def test_signed_mode_persists_fresh_signature(repository, store, video):
    resolver = LocatorResolver(store=store, repository=repository, mode="signed")
    stored = video.with_video_locator(StoredRef("tubely-bucket", "portrait/abc.mp4"))
    before = datetime.now(timezone.utc)

    resolved = resolver.resolve_video(stored)

    assert isinstance(resolved.video_locator, SignedLocator)
    assert store.presigned == [("tubely-bucket", "portrait/abc.mp4", 300)]
    assert resolved.video_locator.expires_at >= before + timedelta(minutes=5)
    assert repository.videos[video.id].video_url == resolved.video_locator.url


def test_each_resolution_mints_a_new_url(repository, store, video):
    resolver = LocatorResolver(store=store, repository=repository)
    stored = video.with_video_locator(StoredRef("tubely-bucket", "other/abc.mp4"))

    first = resolver.resolve_video(stored)
    second = resolver.resolve_video(stored)

    assert first.video_url != second.video_url
    assert len(repository.updates) == 2


def test_already_resolved_video_is_returned_untouched(repository, store, video):
    resolver = LocatorResolver(store=store, repository=repository)
    resolved = video.with_video_locator(DirectLocator("https://cdn.example.com/a.mp4"))

    assert resolver.resolve_video(resolved) is resolved
    assert resolver.resolve_video(video) is video
    assert store.presigned == []


def test_signing_failure_does_not_touch_record(repository, video):
    class FailingStore:
        def presign_get(self, bucket, key, expires_in_seconds):
            raise SigningFailed()

    resolver = LocatorResolver(store=FailingStore(), repository=repository)

    with pytest.raises(SigningFailed):
        resolver.resolve_video(
            video.with_video_locator(StoredRef("tubely-bucket", "other/a.mp4"))
        )
    assert repository.updates == []


def test_unknown_mode_is_rejected(repository, store):
    with pytest.raises(ValueError):
        LocatorResolver(store=store, repository=repository, mode="cdn")


def test_locator_serialization_matches_record_format():
    assert serialize_locator(StoredRef("bucket", "landscape/k.mp4")) == "bucket,landscape/k.mp4"
    assert parse_locator("bucket,landscape/k.mp4") == StoredRef("bucket", "landscape/k.mp4")
    assert parse_locator("https://x.example.com/a?b=1,2") == DirectLocator(
        "https://x.example.com/a?b=1,2"
    )
    assert parse_locator(None) is None
    assert serialize_locator(None) is None
