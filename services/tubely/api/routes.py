from __future__ import annotations

from datetime import datetime
from typing import Callable
from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from services.tubely.api.body_limit import limited_request
from services.tubely.application.dto import GetVideoCommand, UploadMediaCommand
from services.tubely.application.use_cases import (
    GetVideoUseCase,
    UploadThumbnailUseCase,
    UploadVideoUseCase,
)
from services.tubely.domain.errors import InvalidInput
from services.tubely.domain.video import Video
from services.tubely.infrastructure.auth import get_bearer_token, validate_jwt

# Room for multipart boundaries and part headers on top of the file size.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class VideoResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    thumbnail_url: str | None
    video_url: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, video: Video) -> "VideoResponse":
        return cls(
            id=video.id,
            user_id=video.user_id,
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail_url,
            video_url=video.video_url,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )


def _parse_video_id(raw: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError as exc:
        raise InvalidInput("Invalid ID") from exc


def build_authenticator(jwt_secret: str) -> Callable[[Request], UUID]:
    def authenticate(request: Request) -> UUID:
        token = get_bearer_token(request.headers)
        return validate_jwt(token, jwt_secret)

    return authenticate


async def _read_upload(request: Request, field: str, limit: int) -> UploadFile:
    form = await limited_request(request, limit + MULTIPART_OVERHEAD_BYTES).form()
    upload = form.get(field)
    if not isinstance(upload, UploadFile):
        await form.close()
        raise InvalidInput("Unable to parse from file")
    return upload


def create_router(
    upload_thumbnail_use_case: UploadThumbnailUseCase,
    upload_video_use_case: UploadVideoUseCase,
    get_video_use_case: GetVideoUseCase,
    jwt_secret: str,
    *,
    max_thumbnail_bytes: int,
    max_video_bytes: int,
) -> APIRouter:
    router = APIRouter(prefix="/videos", tags=["videos"])
    authenticate = build_authenticator(jwt_secret)

    @router.get("/{video_id}", response_model=VideoResponse)
    def get_video_endpoint(video_id: str, request: Request):
        parsed_id = _parse_video_id(video_id)
        command = GetVideoCommand(video_id=parsed_id, user_id=authenticate(request))
        return VideoResponse.from_domain(get_video_use_case.execute(command))

    async def _upload(
        request: Request, video_id: str, field: str, limit: int, use_case
    ) -> VideoResponse:
        # The body is only read once the id and the caller are known to be valid.
        parsed_id = _parse_video_id(video_id)
        user_id = authenticate(request)
        upload = await _read_upload(request, field, limit)
        try:
            command = UploadMediaCommand(
                video_id=parsed_id,
                user_id=user_id,
                content_type=upload.content_type or "",
                stream=upload.file,
                declared_size=upload.size,
            )
            video = await run_in_threadpool(use_case.execute, command)
        finally:
            await upload.close()
        return VideoResponse.from_domain(video)

    @router.post("/{video_id}/thumbnail", response_model=VideoResponse)
    async def upload_thumbnail_endpoint(video_id: str, request: Request):
        return await _upload(
            request, video_id, "thumbnail", max_thumbnail_bytes, upload_thumbnail_use_case
        )

    @router.post("/{video_id}/video", response_model=VideoResponse)
    async def upload_video_endpoint(video_id: str, request: Request):
        """Upload an MP4; the response carries the resolved video URL."""
        return await _upload(
            request, video_id, "video", max_video_bytes, upload_video_use_case
        )

    return router
