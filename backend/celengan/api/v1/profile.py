"""Profile API endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.core.security import hash_password, verify_password
from celengan.crud.user import user_crud
from celengan.dependencies import get_current_user, get_db
from celengan.models.user import User
from celengan.schemas.user import ProfileDelete, ProfileUpdate
from celengan.schemas.user import User as UserSchema
from celengan.utils.logging_utils import redact_username

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserSchema)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the current user's profile."""
    return current_user


@router.put("", response_model=UserSchema)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update username, avatar or password.

    Changing the password requires the current one.
    """
    if data.new_password:
        if not data.current_password:
            raise HTTPException(status_code=400, detail="Current password is required")
        if not verify_password(data.current_password, current_user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Current password is incorrect",
            )
        current_user.password_hash = hash_password(data.new_password)

    if data.username and data.username != current_user.username:
        if await user_crud.username_taken(db, data.username, current_user.id):
            raise HTTPException(status_code=400, detail="Username already exists")
        current_user.username = data.username

    if data.image is not None:
        # Empty string clears the avatar
        current_user.image = data.image.strip() or None

    try:
        await db.commit()
    except IntegrityError:
        # Lost a race for the same username
        await db.rollback()
        raise HTTPException(status_code=400, detail="Username already exists")

    await db.refresh(current_user)
    logger.info("Updated profile for %s", redact_username(current_user.username))
    return current_user


@router.delete("", status_code=204)
async def delete_profile(
    data: ProfileDelete = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the account and everything it owns. Requires the password."""
    if not verify_password(data.password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Password is incorrect"
        )

    await user_crud.delete(db, current_user.id)
    logger.info("Deleted user %s", current_user.id)
