"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.core.security import create_user_token, verify_password
from celengan.crud.user import user_crud
from celengan.dependencies import get_db
from celengan.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from celengan.schemas.user import User as UserSchema
from celengan.services.category_service import category_service
from celengan.utils.logging_utils import redact_email

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_response(user) -> TokenResponse:
    return TokenResponse(
        access_token=create_user_token(user), user=UserSchema.model_validate(user)
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a new user and seed their default categories."""
    existing = await user_crud.get_by_email_or_username(db, data.email, data.username)
    if existing:
        raise HTTPException(status_code=400, detail="Email or username already exists")

    try:
        user = await user_crud.create(
            db=db,
            email=data.email,
            username=data.username,
            password=data.password,
            commit=False,
        )
        db.add_all(category_service.build_default_categories(user.id))
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        await db.rollback()
        raise HTTPException(status_code=400, detail="Email or username already exists")

    await db.refresh(user)
    logger.info("User registered: %s", redact_email(user.email))

    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange email and password for an access token."""
    user = await user_crud.get_by_email(db, data.email)

    if not user or not verify_password(data.password, user.password_hash):
        logger.warning("Failed login for %s", redact_email(data.email))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is inactive")

    return _token_response(user)
