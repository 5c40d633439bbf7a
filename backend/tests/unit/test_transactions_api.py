"""API tests for transactions and the allocation flow."""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.services.savings_target_service import SavingsTargetService


async def count_transactions(db) -> int:
    return (await db.execute(select(func.count()).select_from(Transaction))).scalar()


@pytest.mark.unit
class TestCreateTransaction:
    """POST /api/v1/transactions/."""

    @pytest.mark.asyncio
    async def test_income_with_allocation(
        self, authenticated_client, db, test_user, income_category, savings_target
    ):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={
                "type": "income",
                "amount": "100000",
                "category_id": str(income_category.id),
                "description": "Freelance",
                "date": "2024-06-01T10:00:00",
                "target_id": str(savings_target.id),
                "allocation_percentage": "25",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["category"]["name"] == "Salary"
        assert Decimal(data["amount"]) == Decimal("100000")

        target = await SavingsTargetService.get_target(db, savings_target.id, test_user)
        assert target.current_amount == Decimal("25000.00")

    @pytest.mark.asyncio
    async def test_plain_expense(self, authenticated_client, expense_category):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={"type": "expense", "amount": 45000, "category_id": str(expense_category.id)},
        )

        assert response.status_code == 201
        assert response.json()["type"] == "expense"

    @pytest.mark.asyncio
    async def test_expense_with_target_is_rejected(
        self, authenticated_client, db, expense_category, savings_target
    ):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={
                "type": "expense",
                "amount": 45000,
                "category_id": str(expense_category.id),
                "target_id": str(savings_target.id),
                "allocation_percentage": 10,
            },
        )

        assert response.status_code == 400
        assert await count_transactions(db) == 0

    @pytest.mark.asyncio
    async def test_unknown_target_is_404_and_writes_nothing(
        self, authenticated_client, db, income_category
    ):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={
                "type": "income",
                "amount": 100000,
                "category_id": str(income_category.id),
                "target_id": str(uuid4()),
                "allocation_percentage": 25,
            },
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Savings target not found"
        assert await count_transactions(db) == 0

    @pytest.mark.asyncio
    async def test_unknown_category_is_404(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={"type": "income", "amount": 100, "category_id": str(uuid4())},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_type_mismatch_is_400(self, authenticated_client, expense_category):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={"type": "income", "amount": 100, "category_id": str(expense_category.id)},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_offset_date_is_stored_as_utc(self, authenticated_client, db, income_category):
        response = await authenticated_client.post(
            "/api/v1/transactions/",
            json={
                "type": "income",
                "amount": 100000,
                "category_id": str(income_category.id),
                "date": "2024-06-01T23:30:00-05:00",
            },
        )

        assert response.status_code == 201
        assert response.json()["date"].startswith("2024-06-02T04:30")

        stored = (await db.execute(select(Transaction))).scalar_one()
        assert stored.date == datetime(2024, 6, 2, 4, 30)
        assert stored.date.tzinfo is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field,value",
        [("amount", 0), ("allocation_percentage", 101), ("allocation_percentage", "33.333")],
    )
    async def test_out_of_range_values(self, authenticated_client, income_category, field, value):
        payload = {"type": "income", "amount": 100, "category_id": str(income_category.id)}
        payload[field] = value

        response = await authenticated_client.post("/api/v1/transactions/", json=payload)

        assert response.status_code == 400


@pytest.mark.unit
class TestReadUpdateDelete:
    """List, export, get, update and delete."""

    @pytest_asyncio.fixture
    async def salary(self, db, test_user, income_category) -> Transaction:
        transaction = Transaction(
            user_id=test_user.id,
            category_id=income_category.id,
            type=TransactionType.INCOME,
            amount=Decimal("5000000"),
            description="June salary",
        )
        db.add(transaction)
        await db.commit()
        return transaction

    @pytest.mark.asyncio
    async def test_list(self, authenticated_client, salary):
        response = await authenticated_client.get("/api/v1/transactions/")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["transactions"][0]["description"] == "June salary"

    @pytest.mark.asyncio
    async def test_list_rejects_bad_month(self, authenticated_client):
        response = await authenticated_client.get(
            "/api/v1/transactions/", params={"month": 13, "year": 2024}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_export_csv(self, authenticated_client, salary):
        response = await authenticated_client.get("/api/v1/transactions/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=transactions_" in response.headers["content-disposition"]
        assert "June salary" in response.text

    @pytest.mark.asyncio
    async def test_get_and_missing(self, authenticated_client, salary):
        found = await authenticated_client.get(f"/api/v1/transactions/{salary.id}")
        missing = await authenticated_client.get(f"/api/v1/transactions/{uuid4()}")

        assert found.status_code == 200
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update(self, authenticated_client, salary):
        response = await authenticated_client.put(
            f"/api/v1/transactions/{salary.id}", json={"description": "Salary + bonus"}
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Salary + bonus"

    @pytest.mark.asyncio
    async def test_update_with_zulu_date(self, authenticated_client, salary):
        response = await authenticated_client.put(
            f"/api/v1/transactions/{salary.id}", json={"date": "2024-06-30T20:00:00Z"}
        )

        assert response.status_code == 200
        assert response.json()["date"].startswith("2024-06-30T20:00")
        assert salary.date == datetime(2024, 6, 30, 20, 0)

    @pytest.mark.asyncio
    async def test_update_to_foreign_category_is_404(
        self, authenticated_client, db, second_user, salary
    ):
        foreign = Category(
            user_id=second_user.id, name="Theirs", type=TransactionType.INCOME, color="#000000", icon="x"
        )
        db.add(foreign)
        await db.commit()

        response = await authenticated_client.put(
            f"/api/v1/transactions/{salary.id}", json={"category_id": str(foreign.id)}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, authenticated_client, db, salary):
        response = await authenticated_client.delete(f"/api/v1/transactions/{salary.id}")

        assert response.status_code == 204
        assert await count_transactions(db) == 0
