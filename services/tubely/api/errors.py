from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from services.tubely.domain.errors import InvalidInput, UploadError

logger = logging.getLogger(__name__)


def error_response(error: UploadError) -> JSONResponse:
    # Internal failures only expose their generic message.
    message = error.default_message if error.status_code >= 500 else error.message
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.classification, "message": message},
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        if exc.status_code >= 500:
            logger.error(
                f"{request.method} {request.url.path} failed: "
                f"{exc.classification} ({exc.message})",
                exc_info=exc.__cause__ or exc,
            )
        else:
            logger.warning(
                f"{request.method} {request.url.path} rejected: "
                f"{exc.classification} ({exc.message})"
            )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"{request.method} {request.url.path} invalid: {exc.errors()}")
        return error_response(InvalidInput("Unable to parse request"))
