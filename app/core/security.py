"""
JWT verification for tokens issued by the external auth provider.

This service never handles passwords; it only validates bearer tokens and
reads the `sub` claim as the user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from app.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT signed with the auth provider secret.

    Used by tests and local tooling to mint tokens shaped like the provider's
    (an `aud` claim is added when AUTH_JWT_AUDIENCE is set).

    Args:
        data: Claims to encode (typically {"sub": user_id})
        expires_delta: Optional lifetime (default: 60 minutes)

    Returns:
        Encoded JWT token as a string
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    if settings.AUTH_JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT token.

    Raises:
        JWTError: If token is invalid, expired, or has the wrong audience
    """
    options = {"verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
        options=options,
    )


__all__ = ["JWTError", "create_access_token", "decode_token"]
