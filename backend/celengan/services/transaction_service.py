"""Service for reading, updating and deleting transactions.

Creation goes through the allocation engine in ``allocation_service``.
"""

import csv
import io
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.models.user import User
from celengan.services.errors import NotFoundError, ValidationError
from celengan.utils.datetime_utils import month_window

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for querying and editing transactions."""

    @staticmethod
    async def get_transactions(
        db: AsyncSession,
        user: User,
        type: Optional[TransactionType] = None,
        category_id: Optional[UUID] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[Transaction]:
        """
        List the user's transactions, newest first.

        Month filtering applies only when both month and year are given.

        Raises:
            ValueError: If month is outside 1..12
        """
        query = (
            select(Transaction)
            .where(Transaction.user_id == user.id)
            .options(selectinload(Transaction.category))
        )
        if type is not None:
            query = query.where(Transaction.type == type)
        if category_id is not None:
            query = query.where(Transaction.category_id == category_id)

        window = month_window(month, year)
        if window:
            start, end = window
            query = query.where(Transaction.date >= start, Transaction.date < end)

        result = await db.execute(query.order_by(Transaction.date.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_transaction(
        db: AsyncSession, transaction_id: UUID, user: User
    ) -> Optional[Transaction]:
        result = await db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id, Transaction.user_id == user.id)
            .options(selectinload(Transaction.category), selectinload(Transaction.allocation))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update_transaction(
        db: AsyncSession,
        transaction_id: UUID,
        user: User,
        **data,
    ) -> Optional[Transaction]:
        """
        Apply a partial update.

        Existing allocations keep their original amount.

        Raises:
            NotFoundError: If a new category is missing or not owned
            ValidationError: If the resulting category and type disagree
        """
        transaction = await TransactionService.get_transaction(db, transaction_id, user)
        if not transaction:
            return None

        changes = {k: v for k, v in data.items() if v is not None}

        category = transaction.category
        if "category_id" in changes:
            result = await db.execute(
                select(Category).where(
                    Category.id == changes["category_id"], Category.user_id == user.id
                )
            )
            category = result.scalar_one_or_none()
            if category is None:
                raise NotFoundError("Category not found")

        new_type = changes.get("type", transaction.type)
        if category is not None and category.type != new_type:
            raise ValidationError("Category type does not match transaction type")
        if new_type == TransactionType.EXPENSE and transaction.allocation is not None:
            raise ValidationError("Allocated income cannot be changed into an expense")

        for field, value in changes.items():
            setattr(transaction, field, value)
        transaction.category = category

        await db.commit()
        return await TransactionService.get_transaction(db, transaction_id, user)

    @staticmethod
    async def delete_transaction(db: AsyncSession, transaction_id: UUID, user: User) -> bool:
        """Delete a transaction; its allocation row cascades, the target amount is kept."""
        transaction = await TransactionService.get_transaction(db, transaction_id, user)
        if not transaction:
            return False

        await db.delete(transaction)
        await db.commit()
        logger.info("Deleted transaction %s for user %s", transaction_id, user.id)
        return True

    @staticmethod
    def to_csv(transactions: List[Transaction]) -> str:
        """Render transactions as CSV text."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Date", "Type", "Category", "Description", "Amount"])
        for txn in transactions:
            writer.writerow(
                [
                    txn.date.strftime("%Y-%m-%d"),
                    TransactionType(txn.type).value,
                    txn.category.name if txn.category else "",
                    txn.description or "",
                    str(txn.amount),
                ]
            )
        return output.getvalue()


transaction_service = TransactionService()
