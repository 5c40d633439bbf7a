"""User and profile schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class User(BaseModel):
    """Public user representation. Never includes the password hash."""

    id: UUID
    email: str
    username: str
    image: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """
    Partial profile update.

    ``image`` semantics: omitted keeps the current avatar, an empty string
    clears it, anything else replaces it.
    """

    username: Optional[str] = Field(None, min_length=3, max_length=100)
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(None, min_length=6)
    image: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be empty")
        return v


class ProfileDelete(BaseModel):
    """Account deletion requires re-entering the password."""

    password: str = Field(..., min_length=1)
