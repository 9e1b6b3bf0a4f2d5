"""
Pytest configuration and shared fixtures for repository tests.

Provides:
- anyio_backend: run async tests on asyncio
- async_engine: per-test in-memory SQLite engine with the schema created
- session_factory: async_sessionmaker bound to that engine
- user_repo / bicycle_repo / order_repo: repositories sharing the factory
- unmigrated_session_factory: sessions on a database with no tables
- alice / bob / trek / giant: seeded users and bicycles

Async Helper Functions:
- acreate_user_in_db(): Insert a User
- acreate_bicycle_in_db(): Insert a Bicycle
- make_order(): Build an unsaved Order
"""

from __future__ import annotations

import sys
from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# Add project root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402 (import after path setup)
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rental.core.db import create_fresh_async_engine, init_database  # noqa: E402
from rental.db.models import Bicycle, Order, User  # noqa: E402
from rental.domain.enums import OrderStatus, UserRole  # noqa: E402
from rental.repos.bicycle_repo import BicycleRepository  # noqa: E402
from rental.repos.order_repo import OrderRepository  # noqa: E402
from rental.repos.user_repo import UserRepository  # noqa: E402

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


# ============================================================================
# Test Database Setup
# ============================================================================


def _sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


@pytest.fixture
async def async_engine(anyio_backend) -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with the full schema; one per test."""
    engine = create_fresh_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return _sessionmaker(async_engine)


@pytest.fixture
async def unmigrated_session_factory(
    anyio_backend,
) -> AsyncGenerator[async_sessionmaker[AsyncSession]]:
    """Sessions on a reachable database that has no tables: every query fails."""
    engine = create_fresh_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    yield _sessionmaker(engine)
    await engine.dispose()


@pytest.fixture
def user_repo(session_factory) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def bicycle_repo(session_factory) -> BicycleRepository:
    return BicycleRepository(session_factory)


@pytest.fixture
def order_repo(session_factory) -> OrderRepository:
    return OrderRepository(session_factory, page_size=7)


# ============================================================================
# Test Data Helpers
# ============================================================================


async def acreate_user_in_db(
    session_factory: async_sessionmaker[AsyncSession],
    login: str = "alice",
    role: UserRole = UserRole.CLIENT,
) -> User:
    async with session_factory() as db:
        user = User(login=login, role=role.value)
        db.add(user)
        await db.commit()
        return user


async def acreate_bicycle_in_db(
    session_factory: async_sessionmaker[AsyncSession],
    model: str = "Trek Marlin 5",
    place: str | None = "Central Station",
) -> Bicycle:
    async with session_factory() as db:
        bicycle = Bicycle(model=model, place=place)
        db.add(bicycle)
        await db.commit()
        return bicycle


def make_order(
    user: User,
    bicycle: Bicycle,
    *,
    hours: int = 2,
    status: OrderStatus | str = OrderStatus.PENDING,
    rental_date: date | None = None,
    order_id: int | None = None,
) -> Order:
    order = Order(
        user_id=user.id,
        bicycle_id=bicycle.id,
        hours=hours,
        status=status,
        rental_date=rental_date or date(2024, 5, 1),
    )
    if order_id is not None:
        order.id = order_id
    return order


@pytest.fixture
async def alice(session_factory) -> User:
    return await acreate_user_in_db(session_factory, "alice")


@pytest.fixture
async def bob(session_factory) -> User:
    return await acreate_user_in_db(session_factory, "bob")


@pytest.fixture
async def trek(session_factory) -> Bicycle:
    return await acreate_bicycle_in_db(session_factory, "Trek Marlin 5", "Central Station")


@pytest.fixture
async def giant(session_factory) -> Bicycle:
    return await acreate_bicycle_in_db(session_factory, "Giant Escape 3", "City Park")
