"""Use cases for the tubely upload service."""

from .get_video import GetVideoUseCase
from .upload_thumbnail import UploadThumbnailUseCase
from .upload_video import UploadVideoUseCase

__all__ = [
    "GetVideoUseCase",
    "UploadThumbnailUseCase",
    "UploadVideoUseCase",
]
