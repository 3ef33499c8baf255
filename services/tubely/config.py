from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOCATOR_MODES = {"signed", "direct"}
THUMBNAIL_STORAGES = {"s3", "local"}


def _load_repo_env() -> None:
    """Load the nearest .env starting from this file upward."""
    current = Path(__file__).resolve()
    for candidate in [current.parent, *current.parents]:
        env_file = candidate / ".env"
        if env_file.exists():
            load_dotenv(env_file)
            return


_load_repo_env()


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or value == "":
        raise ValueError(f"Environment variable {name} is required")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _env_optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a number") from exc


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ValueError(
            f"Environment variable {name} must be one of {sorted(choices)}"
        )
    return value


@dataclass(frozen=True)
class TubelyConfig:
    jwt_secret: str
    s3_bucket: str
    s3_region: str = "us-east-1"
    storage_endpoint_url: str | None = None
    storage_access_key: str | None = None
    storage_secret_key: str | None = None
    public_base_url: str | None = None
    locator_mode: str = "signed"
    signed_url_ttl_seconds: int = 300
    thumbnail_storage: str = "s3"
    assets_root: str = "assets"
    port: int = 8091
    database_url: str = "sqlite:///tubely.db"
    staging_dir: str | None = None
    ffprobe_binary: str = "ffprobe"
    ffmpeg_binary: str = "ffmpeg"
    probe_timeout_seconds: float | None = None
    remux_timeout_seconds: float | None = None
    max_video_bytes: int = 10 << 30
    max_thumbnail_bytes: int = 10 << 20
    log_level: str = "INFO"

    @property
    def assets_base_url(self) -> str:
        return f"http://localhost:{self.port}/assets"


def load_config() -> TubelyConfig:
    return TubelyConfig(
        jwt_secret=_require_env("TUBELY_JWT_SECRET"),
        s3_bucket=_require_env("TUBELY_S3_BUCKET"),
        s3_region=os.getenv("TUBELY_S3_REGION", "us-east-1"),
        storage_endpoint_url=os.getenv("TUBELY_STORAGE_ENDPOINT_URL") or None,
        storage_access_key=os.getenv("TUBELY_STORAGE_ACCESS_KEY") or None,
        storage_secret_key=os.getenv("TUBELY_STORAGE_SECRET_KEY") or None,
        public_base_url=os.getenv("TUBELY_PUBLIC_BASE_URL") or None,
        locator_mode=_env_choice("TUBELY_LOCATOR_MODE", "signed", LOCATOR_MODES),
        signed_url_ttl_seconds=_env_int("TUBELY_SIGNED_URL_TTL_SECONDS", 300),
        thumbnail_storage=_env_choice(
            "TUBELY_THUMBNAIL_STORAGE", "s3", THUMBNAIL_STORAGES
        ),
        assets_root=os.getenv("TUBELY_ASSETS_ROOT", "assets"),
        port=_env_int("TUBELY_PORT", 8091),
        database_url=os.getenv("TUBELY_DATABASE_URL", "sqlite:///tubely.db"),
        staging_dir=os.getenv("TUBELY_STAGING_DIR") or None,
        ffprobe_binary=os.getenv("TUBELY_FFPROBE_BINARY", "ffprobe"),
        ffmpeg_binary=os.getenv("TUBELY_FFMPEG_BINARY", "ffmpeg"),
        probe_timeout_seconds=_env_optional_float("TUBELY_PROBE_TIMEOUT_SECONDS"),
        remux_timeout_seconds=_env_optional_float("TUBELY_REMUX_TIMEOUT_SECONDS"),
        max_video_bytes=_env_int("TUBELY_MAX_VIDEO_BYTES", 10 << 30),
        max_thumbnail_bytes=_env_int("TUBELY_MAX_THUMBNAIL_BYTES", 10 << 20),
        log_level=os.getenv("TUBELY_LOG_LEVEL", "INFO").upper(),
    )
