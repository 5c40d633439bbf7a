"""Service for managing savings targets and reading their allocation ledger."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from celengan.models.savings_target import Allocation, SavingsTarget
from celengan.models.transaction import Transaction
from celengan.models.user import User

logger = logging.getLogger(__name__)


class SavingsTargetService:
    """Service for creating and managing savings targets."""

    @staticmethod
    async def create_target(
        db: AsyncSession,
        user: User,
        name: str,
        target_amount: Decimal,
        target_date: date,
        initial_investment: Decimal = Decimal("0"),
        monthly_contribution: Decimal = Decimal("0"),
        allocation_percentage: Decimal = Decimal("0"),
        is_allocated: bool = False,
    ) -> SavingsTarget:
        """Create a target; its current amount starts at the initial investment."""
        target = SavingsTarget(
            user_id=user.id,
            name=name,
            target_amount=target_amount,
            target_date=target_date,
            initial_investment=initial_investment,
            current_amount=initial_investment,
            monthly_contribution=monthly_contribution,
            allocation_percentage=allocation_percentage,
            is_allocated=is_allocated,
        )

        db.add(target)
        await db.commit()

        return await SavingsTargetService.get_target(db, target.id, user)

    @staticmethod
    async def get_targets(db: AsyncSession, user: User) -> List[SavingsTarget]:
        """Get the user's targets with allocations, nearest deadline first."""
        result = await db.execute(
            select(SavingsTarget)
            .where(SavingsTarget.user_id == user.id)
            .options(selectinload(SavingsTarget.allocations))
            .order_by(SavingsTarget.target_date.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_target(
        db: AsyncSession, target_id: UUID, user: User
    ) -> Optional[SavingsTarget]:
        """Get a target owned by the user, with allocations loaded."""
        result = await db.execute(
            select(SavingsTarget)
            .where(SavingsTarget.id == target_id, SavingsTarget.user_id == user.id)
            .options(selectinload(SavingsTarget.allocations))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def update_target(
        db: AsyncSession,
        target_id: UUID,
        user: User,
        **data,
    ) -> Optional[SavingsTarget]:
        """Apply a partial update. current_amount is never touched here."""
        target = await SavingsTargetService.get_target(db, target_id, user)
        if not target:
            return None

        data.pop("current_amount", None)
        for field, value in data.items():
            if value is not None:
                setattr(target, field, value)

        await db.commit()
        return await SavingsTargetService.get_target(db, target_id, user)

    @staticmethod
    async def delete_target(db: AsyncSession, target_id: UUID, user: User) -> bool:
        """Delete a target and its allocations. Funding transactions are kept."""
        target = await SavingsTargetService.get_target(db, target_id, user)
        if not target:
            return False

        await db.delete(target)
        await db.commit()
        logger.info("Deleted savings target %s for user %s", target_id, user.id)
        return True

    @staticmethod
    async def get_allocations(
        db: AsyncSession, target_id: UUID, user: User
    ) -> List[Allocation]:
        """Allocation history for a target, newest first, with transaction and category."""
        result = await db.execute(
            select(Allocation)
            .where(Allocation.target_id == target_id, Allocation.user_id == user.id)
            .options(selectinload(Allocation.transaction).selectinload(Transaction.category))
            .order_by(Allocation.created_at.desc())
        )
        return list(result.scalars().all())


savings_target_service = SavingsTargetService()
