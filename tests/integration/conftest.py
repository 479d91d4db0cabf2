"""Integration test fixtures with a real (SQLite) database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from statutory_payroll.models import Base, Employee, LeavePolicy
from statutory_payroll.repositories import SqlAlchemyRepository

# One shared in-memory database per engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine with the schema in place."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for integration tests."""
    factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def sql_repository(db_session: AsyncSession) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db_session)


@pytest.fixture
def db_tenant_id() -> UUID:
    return uuid4()


@pytest_asyncio.fixture
async def db_policy(db_session: AsyncSession, db_tenant_id: UUID) -> LeavePolicy:
    policy = LeavePolicy(
        leave_policy_id=uuid4(),
        tenant_id=db_tenant_id,
        annual_leave_days=Decimal("22"),
        carry_over_days=Decimal("5"),
        sick_leave_days_before_cert=Decimal("2"),
        maternity_leave_days=Decimal("98"),
        paternity_leave_days=Decimal("7"),
    )
    db_session.add(policy)
    await db_session.flush()
    return policy


@pytest_asyncio.fixture
async def db_employees(db_session: AsyncSession, db_tenant_id: UUID) -> list[Employee]:
    """Two active employees and one inactive, plus one from another tenant."""
    employees = [
        Employee(
            employee_id=uuid4(),
            tenant_id=db_tenant_id,
            employee_number="E002",
            first_name="Rudo",
            last_name="Chikore",
            hire_date=date(2019, 3, 4),
            is_active=True,
        ),
        Employee(
            employee_id=uuid4(),
            tenant_id=db_tenant_id,
            employee_number="E001",
            first_name="Tendai",
            last_name="Moyo",
            hire_date=date(2025, 1, 10),
            is_active=True,
        ),
        Employee(
            employee_id=uuid4(),
            tenant_id=db_tenant_id,
            employee_number="E003",
            first_name="Farai",
            last_name="Ncube",
            hire_date=date(2018, 5, 1),
            is_active=False,
        ),
        Employee(
            employee_id=uuid4(),
            tenant_id=uuid4(),
            employee_number="E001",
            hire_date=date(2020, 1, 1),
            is_active=True,
        ),
    ]
    db_session.add_all(employees)
    await db_session.flush()
    return employees
