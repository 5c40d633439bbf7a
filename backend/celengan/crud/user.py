"""User lookups and lifecycle."""

from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.core.security import hash_password
from celengan.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserCRUD:
    """Data access for User. Emails are stored and compared lowercase."""

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email_or_username(
        db: AsyncSession, email: str, username: str
    ) -> Optional[User]:
        """First user holding either identifier, for duplicate checks on register."""
        result = await db.execute(
            select(User)
            .where(
                or_(func.lower(User.email) == normalize_email(email), User.username == username)
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def username_taken(db: AsyncSession, username: str, exclude_user_id: UUID) -> bool:
        result = await db.execute(
            select(User.id).where(User.username == username, User.id != exclude_user_id)
        )
        return result.first() is not None

    @staticmethod
    async def create(
        db: AsyncSession,
        email: str,
        username: str,
        password: str,
        commit: bool = True,
    ) -> User:
        """
        Create a user with a hashed password.

        With ``commit=False`` the row is only flushed, so the caller can seed
        related rows (default categories) in the same transaction.
        """
        user = User(
            email=normalize_email(email),
            username=username,
            password_hash=hash_password(password),
        )
        db.add(user)
        if not commit:
            await db.flush()
            return user

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(db: AsyncSession, user_id: UUID) -> None:
        """Delete a user; categories, transactions, targets and allocations cascade."""
        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()


user_crud = UserCRUD()
