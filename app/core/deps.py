"""
FastAPI dependencies for authentication and authorization.

Tokens are issued by the external auth provider; the `sub` claim is the user
id and a matching row must exist in the users table.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from uuid import UUID

from app.core.database import get_db
from app.core.security import decode_token
from app.models.user import User, UserRole

# HTTP Bearer token scheme (Authorization: Bearer <token>)
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate the current user from JWT token.

    Raises:
        HTTPException 401: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(str(payload.get("sub")))
    except (JWTError, ValueError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception

    return user


async def require_sourcer(user: User = Depends(get_current_user)) -> User:
    """
    Raises:
        HTTPException 403: If the user is not a sourcer (admins pass)
    """
    if user.role not in (UserRole.SOURCER, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Sourcer access required"
        )
    return user


async def require_client(user: User = Depends(get_current_user)) -> User:
    """
    Raises:
        HTTPException 403: If the user is not a client (admins pass)
    """
    if user.role not in (UserRole.CLIENT, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client access required"
        )
    return user
