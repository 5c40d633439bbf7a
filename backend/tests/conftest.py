"""Shared fixtures: in-memory SQLite database, seeded users and an ASGI client."""

# The models declare postgresql UUID columns; swap in a SQLite-friendly type
# before any model module is imported.
import uuid as uuid_module

from sqlalchemy import String, TypeDecorator, event
from sqlalchemy.dialects import postgresql as pg_dialect
from sqlalchemy.engine import Engine

_PG_UUID = pg_dialect.UUID


class SQLiteUUID(TypeDecorator):
    """UUID stored as 36-char text on SQLite, native elsewhere."""

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(36))
        return dialect.type_descriptor(_PG_UUID(as_uuid=True))

    def process_bind_param(self, value, dialect):
        if isinstance(value, uuid_module.UUID) and dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        return uuid_module.UUID(value)


pg_dialect.UUID = SQLiteUUID

from datetime import date, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from celengan.core.database import Base, get_db  # noqa: E402
from celengan.core.security import create_user_token, hash_password  # noqa: E402
from celengan.main import app  # noqa: E402
from celengan.models.savings_target import SavingsTarget  # noqa: E402
from celengan.models.transaction import Category, TransactionType  # noqa: E402
from celengan.models.user import User  # noqa: E402

TEST_PASSWORD = "password123"


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """Cascades and NO ACTION checks need foreign keys switched on."""
    if hasattr(dbapi_conn, "execute"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def persist(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


def make_user(email: str, username: str) -> User:
    return User(email=email, username=username, password_hash=hash_password(TEST_PASSWORD))


def make_category(user: User, name: str, type: TransactionType, color: str, icon: str) -> Category:
    return Category(user_id=user.id, name=name, type=type, color=color, icon=icon)


def client_for(app_) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app_), base_url="http://test", follow_redirects=True
    )


@pytest_asyncio.fixture
async def test_engine():
    import celengan.models  # noqa: F401

    # One shared connection, otherwise every session sees a fresh :memory: db
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def db(db_session: AsyncSession) -> AsyncSession:
    """Short alias used by service tests."""
    return db_session


@pytest.fixture
def override_get_db(db_session: AsyncSession):
    async def _get_test_db():
        yield db_session

    return _get_test_db


@pytest_asyncio.fixture
async def async_client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """Client that authenticates through real bearer tokens."""
    app.dependency_overrides[get_db] = override_get_db
    async with client_for(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(override_get_db, test_user: User) -> AsyncGenerator[AsyncClient, None]:
    """Client whose requests all act as ``test_user``."""
    from celengan.dependencies import get_current_user

    async def _as_test_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = _as_test_user
    async with client_for(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await persist(db_session, make_user("test@example.com", "tester"))


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> User:
    """Another account, for ownership checks."""
    return await persist(db_session, make_user("other@example.com", "other"))


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(test_user)}"}


@pytest_asyncio.fixture
async def income_category(db_session: AsyncSession, test_user: User) -> Category:
    return await persist(
        db_session, make_category(test_user, "Salary", TransactionType.INCOME, "#10b981", "💼")
    )


@pytest_asyncio.fixture
async def expense_category(db_session: AsyncSession, test_user: User) -> Category:
    return await persist(
        db_session, make_category(test_user, "Food", TransactionType.EXPENSE, "#ef4444", "🍔")
    )


@pytest_asyncio.fixture
async def savings_target(db_session: AsyncSession, test_user: User) -> SavingsTarget:
    """A 10M target a year out with a 500k monthly plan and nothing saved yet."""
    return await persist(
        db_session,
        SavingsTarget(
            user_id=test_user.id,
            name="Emergency fund",
            target_amount=Decimal("10000000.00"),
            current_amount=Decimal("0.00"),
            target_date=date.today() + timedelta(days=365),
            initial_investment=Decimal("0.00"),
            monthly_contribution=Decimal("500000.00"),
            allocation_percentage=Decimal("0.00"),
            is_allocated=False,
        ),
    )
