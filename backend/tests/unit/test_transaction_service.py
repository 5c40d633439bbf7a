"""Tests for transaction service."""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from celengan.models.savings_target import Allocation
from celengan.models.transaction import Transaction, TransactionType
from celengan.services.allocation_service import AllocationService
from celengan.services.errors import ValidationError
from celengan.services.savings_target_service import SavingsTargetService
from celengan.services.transaction_service import TransactionService


async def add_transaction(db, user, category, amount, when, description=None):
    transaction = Transaction(
        user_id=user.id,
        category_id=category.id,
        type=category.type,
        amount=Decimal(amount),
        date=when,
        description=description,
    )
    db.add(transaction)
    await db.commit()
    return transaction


@pytest.mark.unit
class TestTransactionQueries:
    """Listing and filtering."""

    @pytest.mark.asyncio
    async def test_newest_first_with_category(self, db, test_user, income_category):
        await add_transaction(db, test_user, income_category, "100", datetime(2024, 1, 5))
        await add_transaction(db, test_user, income_category, "200", datetime(2024, 3, 5))

        transactions = await TransactionService.get_transactions(db, test_user)

        assert [t.amount for t in transactions] == [Decimal("200"), Decimal("100")]
        assert transactions[0].category.name == "Salary"

    @pytest.mark.asyncio
    async def test_filters(self, db, test_user, income_category, expense_category):
        await add_transaction(db, test_user, income_category, "100", datetime(2024, 2, 1))
        await add_transaction(db, test_user, expense_category, "40", datetime(2024, 2, 29, 23, 0))
        await add_transaction(db, test_user, expense_category, "60", datetime(2024, 3, 1))

        expenses = await TransactionService.get_transactions(
            db, test_user, type=TransactionType.EXPENSE
        )
        february = await TransactionService.get_transactions(db, test_user, month=2, year=2024)
        by_category = await TransactionService.get_transactions(
            db, test_user, category_id=income_category.id
        )
        month_only = await TransactionService.get_transactions(db, test_user, month=2)

        assert len(expenses) == 2
        assert sorted(t.amount for t in february) == [Decimal("40"), Decimal("100")]
        assert len(by_category) == 1
        assert len(month_only) == 3

    @pytest.mark.asyncio
    async def test_other_users_transactions_hidden(
        self, db, test_user, second_user, income_category
    ):
        transaction = await add_transaction(
            db, test_user, income_category, "100", datetime(2024, 1, 5)
        )

        assert await TransactionService.get_transactions(db, second_user) == []
        assert await TransactionService.get_transaction(db, transaction.id, second_user) is None

    def test_csv(self):
        row = SimpleNamespace(
            date=datetime(2024, 2, 1),
            type=TransactionType.EXPENSE,
            category=SimpleNamespace(name="Food"),
            description="Lunch, office",
            amount=Decimal("45000.00"),
        )

        content = TransactionService.to_csv([row])

        lines = content.strip().splitlines()
        assert lines[0] == "Date,Type,Category,Description,Amount"
        assert lines[1] == '2024-02-01,expense,Food,"Lunch, office",45000.00'


@pytest.mark.unit
class TestTransactionUpdates:
    """Editing and deleting."""

    @pytest.mark.asyncio
    async def test_update_fields(self, db, test_user, income_category):
        transaction = await add_transaction(
            db, test_user, income_category, "100", datetime(2024, 1, 5)
        )

        updated = await TransactionService.update_transaction(
            db, transaction.id, test_user, amount=Decimal("150"), description="Raise"
        )

        assert updated.amount == Decimal("150")
        assert updated.description == "Raise"

    @pytest.mark.asyncio
    async def test_update_rejects_category_type_mismatch(
        self, db, test_user, income_category, expense_category
    ):
        transaction = await add_transaction(
            db, test_user, income_category, "100", datetime(2024, 1, 5)
        )

        with pytest.raises(ValidationError):
            await TransactionService.update_transaction(
                db, transaction.id, test_user, category_id=expense_category.id
            )

    @pytest.mark.asyncio
    async def test_update_type_and_category_together(
        self, db, test_user, income_category, expense_category
    ):
        transaction = await add_transaction(
            db, test_user, income_category, "100", datetime(2024, 1, 5)
        )

        updated = await TransactionService.update_transaction(
            db,
            transaction.id,
            test_user,
            type=TransactionType.EXPENSE,
            category_id=expense_category.id,
        )

        assert updated.type == TransactionType.EXPENSE
        assert updated.category.name == "Food"

    @pytest.mark.asyncio
    async def test_delete_removes_allocation_but_keeps_target_amount(
        self, db, test_user, income_category, savings_target
    ):
        transaction, _ = await AllocationService.create_transaction_with_allocation(
            db=db,
            user=test_user,
            type=TransactionType.INCOME,
            amount=Decimal("100000"),
            category_id=income_category.id,
            target_id=savings_target.id,
            allocation_percentage=Decimal("25"),
        )

        assert await TransactionService.delete_transaction(db, transaction.id, test_user) is True

        allocations = (await db.execute(select(func.count()).select_from(Allocation))).scalar()
        target = await SavingsTargetService.get_target(db, savings_target.id, test_user)
        assert allocations == 0
        assert target.current_amount == Decimal("25000.00")

    @pytest.mark.asyncio
    async def test_delete_missing(self, db, test_user):
        assert await TransactionService.delete_transaction(db, uuid4(), test_user) is False
