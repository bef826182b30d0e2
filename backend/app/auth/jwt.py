"""
Session tokens for signed-in users.

The OAuth callback issues one token per sign-in. It carries the user id as
``sub`` and a random ``jti`` so logout can revoke that single token through
the blacklist.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from ..config import get_settings


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    settings = get_settings()
    lifetime = timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "jti": uuid.uuid4().hex,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry.

    Raises:
        ValueError: for any malformed, tampered or expired token
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def get_token_expiry(token: str) -> datetime | None:
    """When the token stops being valid; None if it cannot be decoded."""
    try:
        exp = decode_access_token(token).get("exp")
    except ValueError:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None
