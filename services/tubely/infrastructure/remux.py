from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from services.tubely.application.interfaces import Remuxer
from services.tubely.domain.errors import RemuxFailed
from services.tubely.infrastructure.staging import StagedArtifact

logger = logging.getLogger(__name__)

PROCESSING_SUFFIX = ".processing"


class FFmpegFastStartRemuxer(Remuxer):
    """Rewrites an MP4 with its moov atom up front, copying streams as-is."""

    def __init__(
        self,
        *,
        binary: str = "ffmpeg",
        log_level: str = "error",
        timeout_seconds: float | None = None,
    ) -> None:
        self._binary = binary
        self._log_level = log_level
        self._timeout_seconds = timeout_seconds

    def remux(self, path: Path) -> StagedArtifact:
        destination = path.with_name(path.name + PROCESSING_SUFFIX)
        output = StagedArtifact(destination)
        try:
            self._run_ffmpeg(path, destination)
        except RemuxFailed:
            output.delete()
            raise
        return output

    def _run_ffmpeg(self, source: Path, destination: Path) -> None:
        cmd = [
            self._binary,
            "-y",
            "-hide_banner",
            "-loglevel",
            self._log_level,
            "-i",
            source.as_posix(),
            "-c",
            "copy",
            "-movflags",
            "faststart",
            "-f",
            "mp4",
            destination.as_posix(),
        ]
        try:
            result = subprocess.run(
                cmd, capture_output=True, timeout=self._timeout_seconds
            )
        except subprocess.TimeoutExpired as exc:
            raise RemuxFailed("Video processing timed out") from exc
        except OSError as exc:
            raise RemuxFailed("Could not run ffmpeg") from exc
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="ignore")
            logger.error(
                f"ffmpeg remux failed for {source.name}: {stderr.strip() or 'unknown error'}"
            )
            raise RemuxFailed()
