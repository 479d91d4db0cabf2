"""Pytest fixtures for statutory payroll tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fakes import InMemoryRepository, make_brackets

from statutory_payroll.calculators.types import TaxBracket
from statutory_payroll.config import Settings
from statutory_payroll.models import ContributionRate, Employee, LeavePolicy, TaxTable


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        engine_version="test",
        levy_rate=Decimal("0.03"),
        default_annual_leave_days=Decimal("22"),
        strict_pay_periods=False,
        leave_policy_fallback=True,
    )


@pytest.fixture
def strict_settings(settings: Settings) -> Settings:
    return Settings(
        database_url=settings.database_url,
        engine_version=settings.engine_version,
        levy_rate=settings.levy_rate,
        default_annual_leave_days=settings.default_annual_leave_days,
        strict_pay_periods=True,
        leave_policy_fallback=False,
    )


@pytest.fixture
def usd_brackets() -> list[TaxBracket]:
    return make_brackets()


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def usd_tax_table(repository: InMemoryRepository, tenant_id: UUID) -> TaxTable:
    table = TaxTable(
        tax_table_id=uuid4(),
        tenant_id=tenant_id,
        name="USD PAYE 2025",
        currency="USD",
        brackets=[b.to_dict() for b in make_brackets()],
        effective_from=date(2025, 1, 1),
        effective_to=None,
    )
    repository.tax_tables.append(table)
    return table


@pytest.fixture
def usd_contribution_rate(repository: InMemoryRepository, tenant_id: UUID) -> ContributionRate:
    rate = ContributionRate(
        contribution_rate_id=uuid4(),
        tenant_id=tenant_id,
        currency="USD",
        employee_rate=Decimal("0.03"),
        employer_rate=Decimal("0.03"),
        max_cap=Decimal("1000"),
        effective_from=date(2025, 1, 1),
        effective_to=None,
    )
    repository.contribution_rates.append(rate)
    return rate


@pytest.fixture
def leave_policy(repository: InMemoryRepository, tenant_id: UUID) -> LeavePolicy:
    policy = LeavePolicy(
        leave_policy_id=uuid4(),
        tenant_id=tenant_id,
        annual_leave_days=Decimal("22"),
        carry_over_days=Decimal("5"),
        sick_leave_days_before_cert=Decimal("2"),
        maternity_leave_days=Decimal("98"),
        paternity_leave_days=Decimal("7"),
    )
    repository.leave_policies[tenant_id] = policy
    return policy


@pytest.fixture
def employee_factory(repository: InMemoryRepository, tenant_id: UUID):
    """Build employees of the test tenant (or another tenant)."""

    def make(
        number: str = "E001",
        hire_date: date | None = date(2025, 1, 10),
        tenant: UUID | None = None,
    ) -> Employee:
        employee = Employee(
            employee_id=uuid4(),
            tenant_id=tenant or tenant_id,
            employee_number=number,
            first_name="Tendai",
            last_name="Moyo",
            hire_date=hire_date,
            currency="USD",
            is_active=True,
        )
        repository.employees[employee.employee_id] = employee
        return employee

    return make


@pytest.fixture
def employee(employee_factory) -> Employee:
    return employee_factory()
