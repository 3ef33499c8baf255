from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from services.tubely.application.interfaces import StagingStore
from services.tubely.domain.errors import StagingFailed

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_PREFIX = "tubely-upload-"


class StagedArtifact:
    """A request-scoped temporary file holding upload bytes or a derivative."""

    def __init__(self, path: Path, file_obj: BinaryIO | None = None) -> None:
        self.path = path
        self._file = file_obj

    @property
    def file(self) -> BinaryIO:
        if self._file is None or self._file.closed:
            self._file = self.path.open("rb")
        return self._file

    def rewind(self) -> None:
        self.file.seek(0)

    def delete(self) -> None:
        if self._file is not None and not self._file.closed:
            self._file.close()
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> "StagedArtifact":
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()


class TempFileStagingStore(StagingStore):
    def __init__(self, directory: str | Path | None = None) -> None:
        self._directory = Path(directory) if directory else None

    def stage(
        self, stream: BinaryIO, *, size_limit: int, suffix: str = ""
    ) -> StagedArtifact:
        try:
            if self._directory is not None:
                self._directory.mkdir(parents=True, exist_ok=True)
            fd, raw_path = tempfile.mkstemp(
                prefix=_PREFIX, suffix=suffix, dir=self._directory
            )
        except OSError as exc:
            raise StagingFailed("Could not create upload file") from exc

        artifact = StagedArtifact(Path(raw_path), os.fdopen(fd, "w+b"))
        try:
            written = _copy_bounded(stream, artifact.file, size_limit)
            artifact.file.flush()
            artifact.rewind()
        except StagingFailed:
            artifact.delete()
            raise
        except OSError as exc:
            artifact.delete()
            raise StagingFailed("Could not copy upload contents") from exc

        logger.info(f"Staged {written} bytes at {artifact.path.name}")
        return artifact


def _copy_bounded(source: BinaryIO, destination: BinaryIO, limit: int) -> int:
    written = 0
    while True:
        chunk = source.read(_CHUNK_SIZE)
        if not chunk:
            return written
        written += len(chunk)
        if written > limit:
            raise StagingFailed(f"Upload exceeds the {limit} byte limit")
        destination.write(chunk)
