from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from pydantic import BaseModel, ValidationError

from services.tubely.application.interfaces import MediaInspector
from services.tubely.domain.errors import InspectionFailed
from services.tubely.domain.media import MediaDescriptor, StreamDimensions

logger = logging.getLogger(__name__)


class _ProbeStream(BaseModel):
    width: int = 0
    height: int = 0


class _ProbeOutput(BaseModel):
    streams: List[_ProbeStream] = []


def parse_probe_output(raw: bytes | str) -> MediaDescriptor:
    """Decode ``ffprobe -print_format json -show_streams`` output.

    Streams without pixel dimensions (audio, data) decode as 0x0 and are
    never chosen as the primary stream. A result with no stream carrying
    dimensions is an inspection failure.
    """
    try:
        parsed = _ProbeOutput.model_validate_json(raw)
    except ValidationError as exc:
        raise InspectionFailed("Could not parse video metadata") from exc
    if not parsed.streams:
        raise InspectionFailed("Video has no streams")
    if not any(stream.width > 0 and stream.height > 0 for stream in parsed.streams):
        raise InspectionFailed("Video has no stream with pixel dimensions")
    return MediaDescriptor(
        streams=tuple(
            StreamDimensions(width=stream.width, height=stream.height)
            for stream in parsed.streams
        )
    )


class FFprobeMediaInspector(MediaInspector):
    def __init__(
        self, *, binary: str = "ffprobe", timeout_seconds: float | None = None
    ) -> None:
        self._binary = binary
        self._timeout_seconds = timeout_seconds

    def inspect(self, path: Path) -> MediaDescriptor:
        cmd = [
            self._binary,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            path.as_posix(),
        ]
        try:
            result = subprocess.run(
                cmd, capture_output=True, timeout=self._timeout_seconds
            )
        except subprocess.TimeoutExpired as exc:
            raise InspectionFailed("Video inspection timed out") from exc
        except OSError as exc:
            raise InspectionFailed("Could not run ffprobe") from exc
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="ignore")
            logger.error(
                f"ffprobe failed for {path.name}: {stderr.strip() or 'unknown error'}"
            )
            raise InspectionFailed()
        return parse_probe_output(result.stdout)
