"""Repository interface the statutory core reads and writes through.

Every engine receives a repository explicitly; there is no process-wide
data-access client. Implementations raise ``RepositoryError`` for data
layer failures instead of returning empty results.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from statutory_payroll.models import (
    ContributionRate,
    CurrencyRate,
    Employee,
    LeaveBalance,
    LeavePolicy,
    TaxTable,
)


@runtime_checkable
class StatutoryRepository(Protocol):
    """Data access used by the calculators and the leave ledger.

    Lookup methods may pre-filter on ``on_date`` but the selection rule
    (which record wins) belongs to the core.
    """

    async def get_tax_tables(
        self, tenant_id: UUID, currency: str, on_date: date | None = None
    ) -> Sequence[TaxTable]:
        """Tax tables for a tenant and currency starting on or before ``on_date``."""
        ...

    async def get_contribution_rates(
        self, tenant_id: UUID, currency: str, on_date: date | None = None
    ) -> Sequence[ContributionRate]:
        """Contribution rates for a tenant and currency starting on or before ``on_date``."""
        ...

    async def get_currency_rates(
        self,
        tenant_id: UUID,
        from_currency: str,
        to_currency: str,
        on_date: date | None = None,
    ) -> Sequence[CurrencyRate]:
        """Directional rates effective on or before ``on_date`` (all when None)."""
        ...

    async def get_leave_policy(self, tenant_id: UUID) -> LeavePolicy | None:
        ...

    async def get_employee(self, employee_id: UUID) -> Employee | None:
        ...

    async def list_active_employees(self, tenant_id: UUID) -> Sequence[Employee]:
        ...

    async def get_leave_balance(
        self, employee_id: UUID, year: int, for_update: bool = False
    ) -> LeaveBalance | None:
        ...

    async def get_leave_balance_by_id(
        self, balance_id: UUID, for_update: bool = False
    ) -> LeaveBalance | None:
        ...

    async def add(
        self, record: TaxTable | ContributionRate | CurrencyRate | LeavePolicy | LeaveBalance
    ) -> None:
        """Stage a new record and flush it."""
        ...

    async def save(self, record: LeavePolicy | LeaveBalance) -> None:
        """Flush changes made to an existing record."""
        ...
