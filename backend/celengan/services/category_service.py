"""Service for managing user categories."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from celengan.config import settings
from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.models.user import User
from celengan.services.errors import ValidationError

logger = logging.getLogger(__name__)

# (name, type, color, icon) seeded for every new user
DEFAULT_CATEGORIES = [
    ("Salary", TransactionType.INCOME, "#10b981", "💰"),
    ("Bonus", TransactionType.INCOME, "#f59e0b", "🎁"),
    ("Investment", TransactionType.INCOME, "#8b5cf6", "📈"),
    ("Other", TransactionType.INCOME, "#6b7280", "📦"),
    ("Food", TransactionType.EXPENSE, "#ef4444", "🍔"),
    ("Transportation", TransactionType.EXPENSE, "#f97316", "🚗"),
    ("Shopping", TransactionType.EXPENSE, "#ec4899", "🛒"),
    ("Bills", TransactionType.EXPENSE, "#3b82f6", "📄"),
    ("Entertainment", TransactionType.EXPENSE, "#14b8a6", "🎬"),
    ("Health", TransactionType.EXPENSE, "#22c55e", "💊"),
    ("Education", TransactionType.EXPENSE, "#a855f7", "📚"),
    ("Other", TransactionType.EXPENSE, "#6b7280", "📦"),
]


class CategoryService:
    """Service for creating and managing categories."""

    @staticmethod
    def build_default_categories(user_id: UUID) -> List[Category]:
        """Default income and expense categories for a new user (not yet added)."""
        return [
            Category(user_id=user_id, name=name, type=type_, color=color, icon=icon)
            for name, type_, color, icon in DEFAULT_CATEGORIES
        ]

    @staticmethod
    async def get_categories(
        db: AsyncSession,
        user: User,
        type: Optional[TransactionType] = None,
    ) -> List[Category]:
        """Get the user's categories ordered by name."""
        query = select(Category).where(Category.user_id == user.id)
        if type is not None:
            query = query.where(Category.type == type)
        result = await db.execute(query.order_by(Category.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_category(db: AsyncSession, category_id: UUID, user: User) -> Optional[Category]:
        """Get a category owned by the user."""
        result = await db.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user.id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_category(
        db: AsyncSession,
        user: User,
        name: str,
        type: TransactionType,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Category:
        category = Category(
            user_id=user.id,
            name=name,
            type=type,
            color=color or settings.DEFAULT_CATEGORY_COLOR,
            icon=icon or settings.DEFAULT_CATEGORY_ICON,
        )
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession,
        category_id: UUID,
        user: User,
        **data,
    ) -> Optional[Category]:
        """Apply a partial update; None values are ignored."""
        category = await CategoryService.get_category(db, category_id, user)
        if not category:
            return None

        for field, value in data.items():
            if value is not None:
                setattr(category, field, value)

        await db.commit()
        await db.refresh(category)
        return category

    @staticmethod
    async def count_transactions(db: AsyncSession, category_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Transaction.id)).where(Transaction.category_id == category_id)
        )
        return result.scalar() or 0

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: UUID, user: User) -> bool:
        """
        Delete a category.

        Returns:
            False if the category does not exist or is not owned by the user

        Raises:
            ValidationError: If any transaction still references the category
        """
        category = await CategoryService.get_category(db, category_id, user)
        if not category:
            return False

        in_use = await CategoryService.count_transactions(db, category.id)
        if in_use > 0:
            raise ValidationError("Cannot delete category with transactions")

        await db.delete(category)
        await db.commit()
        logger.info("Deleted category %s for user %s", category_id, user.id)
        return True


category_service = CategoryService()
