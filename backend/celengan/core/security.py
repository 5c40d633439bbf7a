"""Password hashing and bearer tokens for Celengan accounts."""

from datetime import timedelta
from typing import Any, Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from celengan.config import settings
from celengan.utils.datetime_utils import utc_now

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token.

    ``data["sub"]`` must be the user id as a string. An ``email`` claim is
    optional and only used to label request logs.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": utc_now() + lifetime, "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user) -> str:
    """Access token for a user row."""
    return create_access_token(data={"sub": str(user.id), "email": user.email})


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def get_token_subject(token: str) -> Optional[UUID]:
    """User id carried by a valid access token, or None."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        return None

    try:
        return UUID(payload["sub"])
    except ValueError:
        return None
