"""Allocation engine: routes part of an income transaction to a savings target.

Creating the transaction, appending the allocation and bumping the target's
current amount happen in one database transaction. Ownership of the category
and the target is checked before anything is written, so a rejected request
never leaves an orphan transaction behind.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from celengan.core.logging_config import get_logger
from celengan.models.savings_target import Allocation, SavingsTarget
from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.models.user import User
from celengan.services.errors import NotFoundError, ValidationError
from celengan.services.target_metrics_service import to_decimal
from celengan.utils.datetime_utils import utc_now

logger = get_logger(__name__)

CENTS = Decimal("0.01")


class AllocationService:
    """Use case for creating transactions with an optional target allocation."""

    @staticmethod
    def compute_allocation_amount(amount: Any, percentage: Any) -> Decimal:
        """amount × percentage / 100, rounded to cents."""
        raw = to_decimal(amount) * to_decimal(percentage) / Decimal("100")
        return raw.quantize(CENTS, rounding=ROUND_HALF_UP)

    @staticmethod
    def wants_allocation(target_id: Optional[UUID], percentage: Any) -> bool:
        """An allocation needs both a target and a non-zero percentage."""
        return target_id is not None and percentage is not None and to_decimal(percentage) > 0

    @staticmethod
    async def get_owned_category(
        db: AsyncSession, category_id: UUID, user: User
    ) -> Category:
        result = await db.execute(
            select(Category).where(Category.id == category_id, Category.user_id == user.id)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError("Category not found")
        return category

    @staticmethod
    async def get_owned_target(
        db: AsyncSession, target_id: UUID, user: User
    ) -> SavingsTarget:
        result = await db.execute(
            select(SavingsTarget).where(
                SavingsTarget.id == target_id, SavingsTarget.user_id == user.id
            )
        )
        target = result.scalar_one_or_none()
        if target is None:
            raise NotFoundError("Savings target not found")
        return target

    @staticmethod
    async def apply_allocation(
        db: AsyncSession,
        user: User,
        transaction: Transaction,
        target: SavingsTarget,
        percentage: Any,
    ) -> Optional[Allocation]:
        """
        Append an allocation and increment the target, without committing.

        The percentage is rounded to the stored two decimals before the amount
        is computed. A share that rounds to zero writes nothing and returns None.

        The increment is a single UPDATE expression so concurrent allocations
        to the same target cannot overwrite each other.
        """
        if transaction.type != TransactionType.INCOME:
            raise ValidationError("Only income transactions can be allocated to a savings target")

        percentage = to_decimal(percentage).quantize(CENTS, rounding=ROUND_HALF_UP)
        if not Decimal("0") < percentage <= Decimal("100"):
            raise ValidationError("Allocation percentage must be between 0 and 100")

        amount = AllocationService.compute_allocation_amount(transaction.amount, percentage)
        if amount <= 0:
            logger.info(
                "allocation_skipped",
                transaction_id=str(transaction.id),
                target_id=str(target.id),
                reason="amount rounds to zero",
            )
            return None

        allocation = Allocation(
            user_id=user.id,
            target_id=target.id,
            transaction_id=transaction.id,
            amount=amount,
            percentage=percentage,
            created_at=utc_now(),
        )
        db.add(allocation)

        await db.execute(
            update(SavingsTarget)
            .where(SavingsTarget.id == target.id, SavingsTarget.user_id == user.id)
            .values(current_amount=SavingsTarget.current_amount + amount)
            .execution_options(synchronize_session=False)
        )
        return allocation

    @staticmethod
    async def create_transaction_with_allocation(
        db: AsyncSession,
        user: User,
        type: TransactionType,
        amount: Decimal,
        category_id: UUID,
        description: Optional[str] = None,
        date: Optional[datetime] = None,
        target_id: Optional[UUID] = None,
        allocation_percentage: Optional[Decimal] = None,
    ) -> Tuple[Transaction, Optional[Allocation]]:
        """
        Create a transaction and, for income with a target, its allocation.

        The allocation is None when no target was given or when the share
        rounds to less than a cent.

        Raises:
            NotFoundError: Category or target missing or owned by another user
            ValidationError: Category type mismatch, or allocating an expense
        """
        category = await AllocationService.get_owned_category(db, category_id, user)
        if category.type != type:
            raise ValidationError("Category type does not match transaction type")

        target = None
        if AllocationService.wants_allocation(target_id, allocation_percentage):
            if type != TransactionType.INCOME:
                raise ValidationError(
                    "Only income transactions can be allocated to a savings target"
                )
            target = await AllocationService.get_owned_target(db, target_id, user)

        allocation = None
        try:
            transaction = Transaction(
                user_id=user.id,
                category_id=category.id,
                type=type,
                amount=amount,
                description=description,
                date=date or utc_now(),
            )
            db.add(transaction)
            await db.flush()

            if target is not None:
                allocation = await AllocationService.apply_allocation(
                    db, user, transaction, target, allocation_percentage
                )

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if allocation is not None:
            await db.refresh(target)
            logger.info(
                "allocation_applied",
                transaction_id=str(transaction.id),
                target_id=str(target.id),
                amount=str(allocation.amount),
                percentage=str(allocation.percentage),
            )

        result = await db.execute(
            select(Transaction)
            .where(Transaction.id == transaction.id)
            .options(selectinload(Transaction.category))
        )
        return result.scalar_one(), allocation


allocation_service = AllocationService()
