"""Pytest fixtures for staffing payroll tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from staffing_payroll.database import create_schema
from staffing_payroll.models import Company, Employee, SalaryRateSchedule
from staffing_payroll.services.company_service import CompanyService
from staffing_payroll.services.employee_service import EmployeeService

# In-memory SQLite keeps the suite self-contained; the partial unique
# indexes are declared for both SQLite and Postgres.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@dataclass
class Schedule:
    """Plain rate schedule value for resolver and planner tests."""

    category: str
    sub_category: str
    rate_per_day: Decimal
    effective_from: date
    effective_to: date | None = None
    is_active: bool = True
    schedule_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.schedule_id is None:
            self.schedule_id = uuid4()


@pytest.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def test_company(session: AsyncSession) -> Company:
    """Company with the default salary template."""
    return await CompanyService(session).create_company(
        name="Sentinel Facilities",
        onboarding_date=date(2023, 1, 1),
        address="12 MG Road, Pune",
    )


@pytest.fixture
async def second_company(session: AsyncSession) -> Company:
    return await CompanyService(session).create_company(
        name="Harbour Logistics",
        onboarding_date=date(2023, 6, 1),
    )


@pytest.fixture
async def central_employee(session: AsyncSession) -> Employee:
    """CENTRAL/SKILLED guard enrolled in PF and ESIC."""
    return await EmployeeService(session).create_employee(
        first_name="Ravi",
        last_name="Kumar",
        category="CENTRAL",
        sub_category="SKILLED",
        salary_per_day=Decimal("500"),
        onboarding_date=date(2023, 1, 1),
        pf_enabled=True,
        esic_enabled=True,
        father_name="Suresh Kumar",
        pf_uan_number="100200300400",
    )


@pytest.fixture
async def specialized_employee(session: AsyncSession) -> Employee:
    """SPECIALIZED supervisor on a monthly salary, not enrolled."""
    return await EmployeeService(session).create_employee(
        first_name="Anita",
        last_name="Rao",
        category="SPECIALIZED",
        monthly_salary=Decimal("15000"),
        onboarding_date=date(2023, 1, 1),
    )


@pytest.fixture
async def central_skilled_rates(session: AsyncSession) -> list[SalaryRateSchedule]:
    """500/day for the first half of 2024, 600/day from July."""
    first = SalaryRateSchedule(
        category="CENTRAL",
        sub_category="SKILLED",
        rate_per_day=Decimal("500.00"),
        effective_from=date(2024, 1, 1),
        effective_to=date(2024, 6, 30),
        is_active=True,
    )
    second = SalaryRateSchedule(
        category="CENTRAL",
        sub_category="SKILLED",
        rate_per_day=Decimal("600.00"),
        effective_from=date(2024, 7, 1),
        effective_to=None,
        is_active=True,
    )
    session.add_all([first, second])
    await session.flush()
    return [first, second]
