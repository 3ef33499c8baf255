from __future__ import annotations

import secrets

from services.tubely.application.interfaces import KeyGenerator
from services.tubely.domain.media import AspectBucket

KEY_ENTROPY_BYTES = 32


class RandomKeyGenerator(KeyGenerator):
    def __init__(self, entropy_bytes: int = KEY_ENTROPY_BYTES) -> None:
        self._entropy_bytes = entropy_bytes

    def generate(self, extension: str, bucket: AspectBucket | None = None) -> str:
        # token_urlsafe is unpadded base64url: 32 bytes -> 43 characters.
        token = secrets.token_urlsafe(self._entropy_bytes)
        name = f"{token}.{extension.lstrip('.')}"
        if bucket is None:
            return name
        return f"{bucket.value}/{name}"
