"""Leave balance ledger: per-employee, per-year balances and their mutations.

Two update paths exist and intentionally disagree:

* ``debit`` (leave approval): ``annual_used += days`` and
  ``annual_balance = annual_total - annual_used``. Carry-over is not added
  back and the balance may go negative.
* ``recalculate`` (correction): ``annual_balance = max(0, accrued - annual_used)``
  where ``accrued`` comes from the hire date. Carry-over is ignored.

Every mutation of one ``(employee_id, year)`` balance runs under a single
writer (see ``services.locking``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable
from uuid import UUID, uuid4

from statutory_payroll.calculators.leave_accrual import accrued_leave_days
from statutory_payroll.calculators.types import LeaveType
from statutory_payroll.config import Settings, get_settings
from statutory_payroll.errors import (
    BalanceNotFoundError,
    EmployeeNotFoundError,
    InsufficientLeaveBalanceError,
    MissingHireDateError,
    PolicyMissingError,
    RecordMismatchError,
    StatutoryError,
)
from statutory_payroll.models import Employee, LeaveBalance, LeavePolicy
from statutory_payroll.repositories import StatutoryRepository
from statutory_payroll.services.locking import KeyedLock

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Running-total column and policy entitlement column per non-annual leave type
USAGE_FIELDS: dict[LeaveType, tuple[str, str]] = {
    LeaveType.SICK: ("sick_used", "sick_leave_days_before_cert"),
    LeaveType.MATERNITY: ("maternity_used", "maternity_leave_days"),
    LeaveType.PATERNITY: ("paternity_used", "paternity_leave_days"),
}


def round_days(days: Decimal) -> Decimal:
    """Round a day count to two places, the precision balances are stored at."""
    return Decimal(days).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _check_days(action: str, days: Decimal) -> None:
    """Balances are kept at two decimal places; finer day counts are refused."""
    if days <= 0:
        raise ValueError(f"{action} must be a positive number of days, got {days}")
    if round_days(days) != days:
        raise ValueError(f"{action} of {days} days has more than two decimal places")


def is_consistent(balance: LeaveBalance) -> bool:
    """Check ``annual_balance == annual_total + annual_carry_over - annual_used``."""
    expected = balance.annual_total + balance.annual_carry_over - balance.annual_used
    return balance.annual_balance == expected


@dataclass
class LeaveBalanceResult:
    """A balance plus how it was obtained and any fallbacks used."""

    balance: LeaveBalance
    created: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass
class LeaveBatchResult:
    """Outcome of a tenant-wide operation; one failure does not stop the rest."""

    succeeded: list[UUID] = field(default_factory=list)
    failed: dict[UUID, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


@dataclass
class InitializeResult:
    """Outcome of creating a year's balances for a tenant."""

    created: int = 0
    skipped: int = 0
    succeeded: list[UUID] = field(default_factory=list)
    failed: dict[UUID, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.created + self.skipped + len(self.failed)


class LeaveBalanceService:
    """Creates, debits and recalculates leave balances.

    The repository is injected; the lock registry may be shared between
    service instances in one process so they serialize on the same keys.
    """

    def __init__(
        self,
        repository: StatutoryRepository,
        settings: Settings | None = None,
        locks: KeyedLock | None = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.locks = locks or KeyedLock()

    async def get_or_create(
        self, employee_id: UUID, tenant_id: UUID, year: int
    ) -> LeaveBalanceResult:
        """Get the employee's balance for ``year``, creating it if missing.

        A new balance snapshots the tenant policy's annual days into
        ``annual_total`` and ``annual_balance``; used and carry-over start at 0.

        Raises:
            EmployeeNotFoundError: If the employee does not exist.
            RecordMismatchError: If the employee belongs to another tenant.
            PolicyMissingError: If there is no policy and the fallback is off.
        """
        await self._get_owned_employee(employee_id, tenant_id)

        async with self.locks.hold((employee_id, year)):
            balance = await self.repository.get_leave_balance(employee_id, year)
            if balance is not None:
                return LeaveBalanceResult(balance=balance)

            annual_days, warnings = await self._annual_leave_days(tenant_id)
            balance = self._new_balance(employee_id, year, annual_days, annual_days)
            await self.repository.add(balance)

        logger.info(
            "Created %s leave balance for employee %s: %s days",
            year,
            employee_id,
            balance.annual_total,
        )
        return LeaveBalanceResult(balance=balance, created=True, warnings=warnings)

    async def debit(self, balance_id: UUID, days: Decimal) -> LeaveBalance:
        """Record approved annual leave against a balance.

        ``annual_balance`` becomes ``annual_total - annual_used``; carry-over
        is not added back here. ``days`` may have at most two decimal places.
        """
        _check_days("Debit", days)

        def apply(balance: LeaveBalance) -> None:
            balance.annual_used = round_days(balance.annual_used + days)
            balance.annual_balance = balance.annual_total - balance.annual_used

        balance = await self._mutate(balance_id, apply)
        logger.debug(
            "Debited %s days from balance %s, remaining %s",
            days,
            balance_id,
            balance.annual_balance,
        )
        return balance

    async def credit(self, balance_id: UUID, days: Decimal) -> LeaveBalance:
        """Return previously debited annual leave (e.g. a cancelled request)."""
        _check_days("Credit", days)

        def apply(balance: LeaveBalance) -> None:
            balance.annual_used = round_days(balance.annual_used - days)
            balance.annual_balance = balance.annual_total - balance.annual_used

        return await self._mutate(balance_id, apply)

    async def record_usage(
        self, balance_id: UUID, leave_type: LeaveType | str, days: Decimal
    ) -> LeaveBalanceResult:
        """Add to the running total of sick, maternity or paternity leave.

        These totals are never recalculated. Going past the policy figure is
        allowed but reported as a warning.
        """
        leave_type = LeaveType(leave_type)
        if leave_type not in USAGE_FIELDS:
            raise ValueError(f"{leave_type.value} leave is debited, not recorded as usage")
        _check_days("Usage", days)

        used_field, policy_field = USAGE_FIELDS[leave_type]

        def apply(balance: LeaveBalance) -> None:
            setattr(balance, used_field, round_days(getattr(balance, used_field) + days))

        balance = await self._mutate(balance_id, apply)

        warnings: list[str] = []
        employee = await self.repository.get_employee(balance.employee_id)
        policy = await self.repository.get_leave_policy(employee.tenant_id) if employee else None
        if policy is not None:
            used = getattr(balance, used_field)
            limit = getattr(policy, policy_field)
            if used > limit:
                if leave_type is LeaveType.SICK:
                    warnings.append(
                        f"Sick leave of {used} days exceeds {limit} days; "
                        "a medical certificate is required"
                    )
                else:
                    warnings.append(
                        f"{leave_type.value.title()} leave of {used} days exceeds "
                        f"the {limit} day entitlement"
                    )
        for warning in warnings:
            logger.warning("Balance %s: %s", balance_id, warning)

        return LeaveBalanceResult(balance=balance, warnings=warnings)

    async def approve_leave(
        self, balance_id: UUID, leave_type: LeaveType | str, days: Decimal
    ) -> LeaveBalanceResult:
        """Apply an approved leave request to its balance."""
        if LeaveType(leave_type) is LeaveType.ANNUAL:
            return LeaveBalanceResult(balance=await self.debit(balance_id, days))
        return await self.record_usage(balance_id, leave_type, days)

    async def ensure_sufficient_balance(
        self, employee_id: UUID, tenant_id: UUID, year: int, days: Decimal
    ) -> LeaveBalanceResult:
        """Check an annual leave request fits the available balance.

        Raises:
            InsufficientLeaveBalanceError: If ``annual_balance < days``.
        """
        result = await self.get_or_create(employee_id, tenant_id, year)
        if result.balance.annual_balance < days:
            raise InsufficientLeaveBalanceError(
                employee_id, result.balance.annual_balance, days
            )
        return result

    async def recalculate(
        self, employee_id: UUID, tenant_id: UUID, as_of: date | None = None
    ) -> LeaveBalanceResult:
        """Resync the ``as_of`` year's balance to policy and hire-date accrual.

        Keeps ``annual_used``, sets ``annual_total`` to the policy's annual
        days and ``annual_balance`` to ``max(0, accrued - annual_used)``.
        A missing balance is created with ``annual_balance = accrued``.

        Raises:
            EmployeeNotFoundError, RecordMismatchError: Ownership failures.
            MissingHireDateError: If the employee has no hire date.
            PolicyMissingError: If there is no policy and the fallback is off.
        """
        as_of = as_of or date.today()
        employee = await self._get_owned_employee(employee_id, tenant_id)
        if employee.hire_date is None:
            raise MissingHireDateError(employee_id)

        annual_days, warnings = await self._annual_leave_days(tenant_id)
        accrued = accrued_leave_days(employee.hire_date, annual_days, as_of)
        year = as_of.year

        async with self.locks.hold((employee_id, year)):
            balance = await self.repository.get_leave_balance(employee_id, year, for_update=True)
            created = balance is None
            if balance is None:
                balance = self._new_balance(employee_id, year, annual_days, accrued)
                await self.repository.add(balance)
            else:
                balance.annual_total = round_days(annual_days)
                balance.annual_balance = round_days(max(ZERO, accrued - balance.annual_used))
                await self.repository.save(balance)

        logger.info(
            "Recalculated leave for employee %s: %s accrued, %s used, %s remaining",
            employee_id,
            round_days(accrued),
            balance.annual_used,
            balance.annual_balance,
        )
        return LeaveBalanceResult(balance=balance, created=created, warnings=warnings)

    async def recalculate_all(
        self, tenant_id: UUID, as_of: date | None = None
    ) -> LeaveBatchResult:
        """Recalculate every active employee of a tenant.

        Employees are independent: a failure is recorded against that
        employee and the batch continues. Runs sequentially because the
        repository session is shared.
        """
        result = LeaveBatchResult()
        employees = await self.repository.list_active_employees(tenant_id)

        for employee in employees:
            try:
                outcome = await self.recalculate(employee.employee_id, tenant_id, as_of)
            except StatutoryError as e:
                logger.warning(
                    "Leave recalculation failed for employee %s: %s", employee.employee_id, e
                )
                result.failed[employee.employee_id] = str(e)
                continue
            result.succeeded.append(employee.employee_id)
            for warning in outcome.warnings:
                if warning not in result.warnings:
                    result.warnings.append(warning)

        logger.info(
            "Recalculated leave for tenant %s: %d succeeded, %d failed",
            tenant_id,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    async def initialize_year(self, tenant_id: UUID, year: int) -> InitializeResult:
        """Create the year's balance for every active employee who lacks one.

        A failure is recorded against that employee and the rest continue.
        """
        result = InitializeResult()
        employees = await self.repository.list_active_employees(tenant_id)

        for employee in employees:
            try:
                outcome = await self.get_or_create(employee.employee_id, tenant_id, year)
            except StatutoryError as e:
                logger.warning(
                    "Leave balance creation failed for employee %s: %s", employee.employee_id, e
                )
                result.failed[employee.employee_id] = str(e)
                continue
            result.succeeded.append(employee.employee_id)
            if outcome.created:
                result.created += 1
            else:
                result.skipped += 1
            for warning in outcome.warnings:
                if warning not in result.warnings:
                    result.warnings.append(warning)

        return result

    async def _mutate(
        self, balance_id: UUID, apply: Callable[[LeaveBalance], None]
    ) -> LeaveBalance:
        """Read-modify-write one balance under its single-writer lock."""
        existing = await self.repository.get_leave_balance_by_id(balance_id)
        if existing is None:
            raise BalanceNotFoundError(balance_id)

        async with self.locks.hold(existing.key):
            balance = await self.repository.get_leave_balance_by_id(balance_id, for_update=True)
            if balance is None:
                raise BalanceNotFoundError(balance_id)
            apply(balance)
            await self.repository.save(balance)

        return balance

    async def _get_owned_employee(self, employee_id: UUID, tenant_id: UUID) -> Employee:
        employee = await self.repository.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        if employee.tenant_id != tenant_id:
            raise RecordMismatchError("Employee", employee_id, tenant_id)
        return employee

    async def _annual_leave_days(self, tenant_id: UUID) -> tuple[Decimal, list[str]]:
        """Annual days from the tenant policy, or the documented default."""
        policy: LeavePolicy | None = await self.repository.get_leave_policy(tenant_id)
        if policy is not None:
            return policy.annual_leave_days, []

        if not self.settings.leave_policy_fallback:
            raise PolicyMissingError(tenant_id)

        default = self.settings.default_annual_leave_days
        warning = f"No leave policy for tenant {tenant_id}; using default of {default} annual days"
        logger.warning(warning)
        return default, [warning]

    @staticmethod
    def _new_balance(
        employee_id: UUID, year: int, annual_total: Decimal, annual_balance: Decimal
    ) -> LeaveBalance:
        return LeaveBalance(
            balance_id=uuid4(),
            employee_id=employee_id,
            year=year,
            annual_total=round_days(annual_total),
            annual_used=ZERO,
            annual_balance=round_days(annual_balance),
            annual_carry_over=ZERO,
            sick_used=ZERO,
            maternity_used=ZERO,
            paternity_used=ZERO,
        )
