from __future__ import annotations

from typing import Mapping
from uuid import UUID

from jose import JWTError, jwt

from services.tubely.domain.errors import Unauthenticated

JWT_ALGORITHM = "HS256"


def get_bearer_token(headers: Mapping[str, str]) -> str:
    header = headers.get("authorization") or headers.get("Authorization")
    if not header:
        raise Unauthenticated("Couldn't find JWT")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Couldn't find JWT")
    return token.strip()


def validate_jwt(token: str, secret: str) -> UUID:
    """Return the user id carried in the ``sub`` claim of a signed token."""
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
        return UUID(str(claims["sub"]))
    except (JWTError, KeyError, ValueError) as exc:
        raise Unauthenticated("Couldn't validate JWT") from exc
