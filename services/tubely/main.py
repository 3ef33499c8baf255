from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from services.tubely.api.errors import register_error_handlers
from services.tubely.api.routes import create_router
from services.tubely.application.interfaces import ObjectStore, VideoRepository
from services.tubely.application.locators import LocatorResolver
from services.tubely.application.use_cases import (
    GetVideoUseCase,
    UploadThumbnailUseCase,
    UploadVideoUseCase,
)
from services.tubely.config import TubelyConfig, load_config
from services.tubely.infrastructure.db import create_session_factory
from services.tubely.infrastructure.ids import RandomKeyGenerator
from services.tubely.infrastructure.probe import FFprobeMediaInspector
from services.tubely.infrastructure.remux import FFmpegFastStartRemuxer
from services.tubely.infrastructure.staging import TempFileStagingStore
from services.tubely.infrastructure.storage import (
    LocalAssetStore,
    S3ObjectStore,
    create_s3_client,
)
from services.tubely.infrastructure.videos import SqlVideoRepository

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def build_app(
    config: TubelyConfig | None = None,
    *,
    repository: VideoRepository | None = None,
    video_store: ObjectStore | None = None,
) -> FastAPI:
    cfg = config or load_config()
    app = FastAPI(title="Tubely Upload Service")
    register_error_handlers(app)

    @app.get("/ping")
    async def ping():
        return {"message": "pong"}

    repository = repository or SqlVideoRepository(
        session_factory=create_session_factory(cfg.database_url)
    )
    video_store = video_store or S3ObjectStore(
        create_s3_client(cfg),
        region=cfg.s3_region,
        public_base_url=cfg.public_base_url,
    )
    if cfg.thumbnail_storage == "local":
        assets_root = Path(cfg.assets_root)
        assets_root.mkdir(parents=True, exist_ok=True)
        thumbnail_store: ObjectStore = LocalAssetStore(
            assets_root, base_url=cfg.assets_base_url
        )
        app.mount("/assets", StaticFiles(directory=assets_root), name="assets")
    else:
        thumbnail_store = video_store

    staging = TempFileStagingStore(cfg.staging_dir)
    keys = RandomKeyGenerator()
    resolver = LocatorResolver(
        store=video_store,
        repository=repository,
        mode=cfg.locator_mode,
        ttl=timedelta(seconds=cfg.signed_url_ttl_seconds),
    )

    upload_thumbnail_use_case = UploadThumbnailUseCase(
        repository=repository,
        staging=staging,
        keys=keys,
        store=thumbnail_store,
        bucket=cfg.s3_bucket,
        max_bytes=cfg.max_thumbnail_bytes,
    )
    upload_video_use_case = UploadVideoUseCase(
        repository=repository,
        staging=staging,
        inspector=FFprobeMediaInspector(
            binary=cfg.ffprobe_binary, timeout_seconds=cfg.probe_timeout_seconds
        ),
        remuxer=FFmpegFastStartRemuxer(
            binary=cfg.ffmpeg_binary, timeout_seconds=cfg.remux_timeout_seconds
        ),
        keys=keys,
        store=video_store,
        resolver=resolver,
        bucket=cfg.s3_bucket,
        max_bytes=cfg.max_video_bytes,
    )
    get_video_use_case = GetVideoUseCase(repository=repository, resolver=resolver)

    app.include_router(
        create_router(
            upload_thumbnail_use_case,
            upload_video_use_case,
            get_video_use_case,
            cfg.jwt_secret,
            max_thumbnail_bytes=cfg.max_thumbnail_bytes,
            max_video_bytes=cfg.max_video_bytes,
        )
    )
    return app


def create_app() -> FastAPI:
    cfg = load_config()
    configure_logging(cfg.log_level)
    return build_app(cfg)
