"""SQLAlchemy implementation of the statutory repository."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from statutory_payroll.errors import RepositoryError
from statutory_payroll.models import (
    ContributionRate,
    CurrencyRate,
    Employee,
    LeaveBalance,
    LeavePolicy,
    TaxTable,
)


class SqlAlchemyRepository:
    """Repository backed by an AsyncSession.

    The session's transaction is owned by the caller (see
    ``database.get_session``); this class only flushes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_tax_tables(
        self, tenant_id: UUID, currency: str, on_date: date | None = None
    ) -> Sequence[TaxTable]:
        stmt = select(TaxTable).where(
            TaxTable.tenant_id == tenant_id,
            TaxTable.currency == currency,
        )
        if on_date is not None:
            stmt = stmt.where(TaxTable.effective_from <= on_date)
        return await self._scalars("get_tax_tables", stmt)

    async def get_contribution_rates(
        self, tenant_id: UUID, currency: str, on_date: date | None = None
    ) -> Sequence[ContributionRate]:
        stmt = select(ContributionRate).where(
            ContributionRate.tenant_id == tenant_id,
            ContributionRate.currency == currency,
        )
        if on_date is not None:
            stmt = stmt.where(ContributionRate.effective_from <= on_date)
        return await self._scalars("get_contribution_rates", stmt)

    async def get_currency_rates(
        self,
        tenant_id: UUID,
        from_currency: str,
        to_currency: str,
        on_date: date | None = None,
    ) -> Sequence[CurrencyRate]:
        stmt = select(CurrencyRate).where(
            CurrencyRate.tenant_id == tenant_id,
            CurrencyRate.from_currency == from_currency,
            CurrencyRate.to_currency == to_currency,
        )
        if on_date is not None:
            stmt = stmt.where(CurrencyRate.effective_date <= on_date)
        return await self._scalars("get_currency_rates", stmt)

    async def get_leave_policy(self, tenant_id: UUID) -> LeavePolicy | None:
        stmt = select(LeavePolicy).where(LeavePolicy.tenant_id == tenant_id)
        return await self._scalar("get_leave_policy", stmt)

    async def get_employee(self, employee_id: UUID) -> Employee | None:
        stmt = select(Employee).where(Employee.employee_id == employee_id)
        return await self._scalar("get_employee", stmt)

    async def list_active_employees(self, tenant_id: UUID) -> Sequence[Employee]:
        stmt = (
            select(Employee)
            .where(Employee.tenant_id == tenant_id, Employee.is_active.is_(True))
            .order_by(Employee.employee_number)
        )
        return await self._scalars("list_active_employees", stmt)

    async def get_leave_balance(
        self, employee_id: UUID, year: int, for_update: bool = False
    ) -> LeaveBalance | None:
        stmt = select(LeaveBalance).where(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.year == year,
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self._scalar("get_leave_balance", stmt)

    async def get_leave_balance_by_id(
        self, balance_id: UUID, for_update: bool = False
    ) -> LeaveBalance | None:
        stmt = select(LeaveBalance).where(LeaveBalance.balance_id == balance_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self._scalar("get_leave_balance_by_id", stmt)

    async def add(self, record: Any) -> None:
        self.session.add(record)
        await self._flush("add")

    async def save(self, record: Any) -> None:
        self.session.add(record)
        await self._flush("save")

    async def _scalars(self, operation: str, stmt: Select[Any]) -> list[Any]:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(operation, e) from e
        return list(result.scalars().all())

    async def _scalar(self, operation: str, stmt: Select[Any]) -> Any:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(operation, e) from e
        return result.scalar_one_or_none()

    async def _flush(self, operation: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(operation, e) from e
