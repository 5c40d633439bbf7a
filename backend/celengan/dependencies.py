"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.core.database import get_db
from celengan.core.security import get_token_subject
from celengan.crud.user import user_crud
from celengan.models.user import User

# auto_error=False so a missing header yields 401 instead of 403
security = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_current_user"]


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the user that every service call is scoped to.

    Raises:
        HTTPException: 401 if the token is missing, invalid or the user is gone
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user_id = get_token_subject(credentials.credentials)
    if user_id is None:
        raise _unauthorized()

    user = await user_crud.get_by_id(db, user_id)
    if user is None or not user.is_active:
        raise _unauthorized()

    return user
