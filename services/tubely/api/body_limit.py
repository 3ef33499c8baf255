from __future__ import annotations

from starlette.requests import Request
from starlette.types import Message, Receive

from services.tubely.domain.errors import InvalidInput, UploadTooLarge


def check_content_length(request: Request, limit: int) -> None:
    raw = request.headers.get("content-length")
    if raw is None:
        return
    try:
        declared = int(raw)
    except ValueError as exc:
        raise InvalidInput("Invalid Content-Length") from exc
    if declared > limit:
        raise UploadTooLarge(f"Request body exceeds the {limit} byte limit")


def limit_receive(receive: Receive, limit: int) -> Receive:
    """Wrap an ASGI receive callable so the body stops being read past ``limit``."""
    consumed = 0

    async def limited() -> Message:
        nonlocal consumed
        message = await receive()
        if message["type"] == "http.request":
            consumed += len(message.get("body", b""))
            if consumed > limit:
                raise UploadTooLarge(f"Request body exceeds the {limit} byte limit")
        return message

    return limited


def limited_request(request: Request, limit: int) -> Request:
    """Return a view of ``request`` whose body reads fail once ``limit`` is passed.

    Bodies without a Content-Length (chunked) are only caught by the counting
    wrapper, so both checks are applied.
    """
    check_content_length(request, limit)
    return Request(request.scope, receive=limit_receive(request.receive, limit))
