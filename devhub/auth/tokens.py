"""Signed session tokens (JWT, HS256)."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from devhub.errors import Unauthorized

JWT_ALG = "HS256"


def create_access_token(user_id: str, secret: str, expires_delta: timedelta) -> tuple[str, str, datetime]:
    """Return ``(token, jti, expires_at)`` for ``user_id``."""
    jti = uuid.uuid4().hex
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": user_id, "jti": jti, "exp": expire}
    return jwt.encode(to_encode, secret, algorithm=JWT_ALG), jti, expire


def decode_access_token(token: str, secret: str) -> dict:
    """Verify signature and expiry. Raises ``Unauthorized`` on any failure."""
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALG])
    except JWTError as exc:
        raise Unauthorized("Invalid or expired token") from exc
    if not claims.get("sub") or not claims.get("jti"):
        raise Unauthorized("Invalid or expired token")
    return claims
