from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from services.tubely.domain.errors import InspectionFailed


class AspectBucket(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


@dataclass(frozen=True)
class StreamDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class MediaDescriptor:
    streams: Tuple[StreamDimensions, ...]

    @property
    def primary_stream(self) -> StreamDimensions:
        """First stream with pixel dimensions; audio and data streams are skipped."""
        for stream in self.streams:
            if stream.width > 0 and stream.height > 0:
                return stream
        raise InspectionFailed("Video has no stream with pixel dimensions")


def classify_aspect(width: int, height: int) -> AspectBucket:
    """Bucket pixel dimensions into landscape (16:9), portrait (9:16) or other.

    The comparison is integer-exact with no tolerance: 1920x1080 is
    landscape, but 1000x563 (close to, not exactly, 16:9) is ``other``.
    Many real encodes with odd dimensions therefore land in ``other``.
    """
    if width * 9 == height * 16:
        return AspectBucket.LANDSCAPE
    if height * 9 == width * 16:
        return AspectBucket.PORTRAIT
    return AspectBucket.OTHER
