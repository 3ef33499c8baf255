from __future__ import annotations


class UploadError(Exception):
    """Base class for every terminal failure of an upload request."""

    classification = "internal_error"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(UploadError):
    classification = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(UploadError):
    classification = "unauthenticated"
    status_code = 401
    default_message = "Couldn't validate credentials"


class Unauthorized(UploadError):
    classification = "unauthorized"
    status_code = 401
    default_message = "Could not access video"


class NotFound(UploadError):
    classification = "not_found"
    status_code = 404
    default_message = "Video not found"


class UploadTooLarge(UploadError):
    classification = "upload_too_large"
    status_code = 413
    default_message = "Upload exceeds the size limit"


class StagingFailed(UploadError):
    classification = "staging_failed"
    default_message = "Could not store upload"


class InspectionFailed(UploadError):
    classification = "inspection_failed"
    default_message = "Could not inspect video"


class RemuxFailed(UploadError):
    classification = "remux_failed"
    default_message = "Could not process video"


class TransferFailed(UploadError):
    classification = "transfer_failed"
    default_message = "Could not store object"


class RecordUpdateFailed(UploadError):
    classification = "record_update_failed"
    default_message = "Could not update video"


class SigningFailed(UploadError):
    classification = "signing_failed"
    default_message = "Could not sign video URL"
