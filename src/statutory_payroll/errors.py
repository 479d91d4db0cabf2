"""Typed errors raised by the statutory calculation core.

Every error carries the inputs that produced it so the calling payroll run
can decide whether to abort the whole run or skip a single employee.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID


class StatutoryError(Exception):
    """Base class for all statutory core errors."""


class NotConfiguredError(StatutoryError):
    """Raised when no tax table or contribution rate applies.

    Fatal to the calculation: the pay period must be aborted, never
    computed with a zero default.
    """

    def __init__(self, kind: str, tenant_id: UUID, currency: str, on_date: date):
        self.kind = kind
        self.tenant_id = tenant_id
        self.currency = currency
        self.on_date = on_date
        super().__init__(
            f"No {kind} configured for tenant {tenant_id} in {currency} effective {on_date}"
        )


class RateNotFoundError(StatutoryError):
    """Raised when no exchange rate exists on or before the requested date."""

    def __init__(
        self,
        tenant_id: UUID,
        from_currency: str,
        to_currency: str,
        on_date: date | None,
    ):
        self.tenant_id = tenant_id
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.on_date = on_date
        when = f"on or before {on_date}" if on_date else "at any date"
        super().__init__(
            f"No exchange rate {from_currency}->{to_currency} for tenant {tenant_id} {when}"
        )


class InvalidPeriodError(StatutoryError):
    """Raised for an unrecognized pay period code when strict periods are on."""

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Unrecognized pay period '{period}'")


class PolicyMissingError(StatutoryError):
    """Raised when a tenant has no leave policy and the fallback is disabled."""

    def __init__(self, tenant_id: UUID):
        self.tenant_id = tenant_id
        super().__init__(f"No leave policy configured for tenant {tenant_id}")


class EmployeeNotFoundError(StatutoryError):
    """Raised when an employee record does not exist."""

    def __init__(self, employee_id: UUID):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class RecordMismatchError(StatutoryError):
    """Raised when a record does not belong to the tenant it was requested for."""

    def __init__(self, entity: str, entity_id: UUID, tenant_id: UUID):
        self.entity = entity
        self.entity_id = entity_id
        self.tenant_id = tenant_id
        super().__init__(f"{entity} {entity_id} does not belong to tenant {tenant_id}")


class MissingHireDateError(StatutoryError):
    """Raised when leave accrual is requested for an employee without a hire date."""

    def __init__(self, employee_id: UUID):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} has no hire date")


class BalanceNotFoundError(StatutoryError):
    """Raised when a leave balance id does not resolve to a record."""

    def __init__(self, balance_id: UUID):
        self.balance_id = balance_id
        super().__init__(f"Leave balance {balance_id} not found")


class InsufficientLeaveBalanceError(StatutoryError):
    """Raised when an annual leave request exceeds the available balance."""

    def __init__(self, employee_id: UUID, available: Decimal, requested: Decimal):
        self.employee_id = employee_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient leave balance for employee {employee_id}. "
            f"Available: {available} days, Requested: {requested} days"
        )


class ConfigurationImportError(StatutoryError):
    """Raised when an imported configuration document cannot be stored."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class RepositoryError(StatutoryError):
    """Raised when the data layer fails while serving the core."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Repository failure during {operation}: {cause}")
