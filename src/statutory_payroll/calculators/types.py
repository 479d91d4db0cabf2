"""Type definitions for the statutory calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class PayPeriod(str, Enum):
    """Pay period codes and their fixed annualization multipliers."""

    MONTHLY = "MONTHLY"
    FORTNIGHTLY = "FORTNIGHTLY"
    WEEKLY = "WEEKLY"
    DAILY = "DAILY"

    @property
    def multiplier(self) -> int:
        return PERIOD_MULTIPLIERS[self]


# Policy constants, never derived from calendar arithmetic.
PERIOD_MULTIPLIERS: dict[PayPeriod, int] = {
    PayPeriod.MONTHLY: 12,
    PayPeriod.FORTNIGHTLY: 26,
    PayPeriod.WEEKLY: 52,
    PayPeriod.DAILY: 260,
}


class LeaveType(str, Enum):
    """Leave categories tracked on a balance."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"


@dataclass(frozen=True)
class TaxBracket:
    """Tax bracket for progressive taxation.

    ``fixed_amount`` is the tax due on all lower brackets, i.e. the tax at
    ``min_amount``.
    """

    min_amount: Decimal
    max_amount: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.20 for 20%
    fixed_amount: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "min": str(self.min_amount),
            "max": str(self.max_amount) if self.max_amount is not None else None,
            "fixed": str(self.fixed_amount),
            "rate": str(self.rate),
        }

    def describe(self) -> str:
        upper = self.max_amount if self.max_amount is not None else "∞"
        return f"{self.min_amount} - {upper} @ {(self.rate * 100).normalize()}%"


@dataclass
class PAYEInput:
    """Inputs for one employee's PAYE in one pay period."""

    taxable_income: Decimal
    currency: str
    period: PayPeriod | str
    ytd_taxable: Decimal
    ytd_paye: Decimal
    period_date: date
    tenant_id: UUID


@dataclass
class PAYEResult:
    """PAYE for one period plus carried-forward YTD figures.

    ``applied_bracket`` and ``effective_tax_rate`` are for audit display only.
    """

    paye_this_period: Decimal
    updated_ytd_taxable: Decimal
    updated_ytd_paye: Decimal
    effective_tax_rate: Decimal
    applied_bracket: TaxBracket | None
    explanation: str
    tax_table_id: UUID | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class ContributionResult:
    """Employee and employer social-security contributions."""

    employee_contribution: Decimal
    employer_contribution: Decimal
    contributory_pay: Decimal
    capped: bool
    effective_employee_rate: Decimal
    effective_employer_rate: Decimal
    explanation: str
    contribution_rate_id: UUID | None = None

    @property
    def total_contribution(self) -> Decimal:
        return self.employee_contribution + self.employer_contribution


@dataclass
class EmployeePeriodInput:
    """Everything needed to compute statutory deductions for one employee-period."""

    employee_id: UUID
    tenant_id: UUID
    currency: str
    period: PayPeriod | str
    period_date: date
    gross_pay: Decimal
    taxable_income: Decimal
    ytd_taxable: Decimal = Decimal("0")
    ytd_paye: Decimal = Decimal("0")


@dataclass
class StatutoryDeductions:
    """PAYE, levy and social-security for one employee-period."""

    employee_id: UUID
    calculation_id: UUID
    paye: PAYEResult
    levy: Decimal
    contribution: ContributionResult
    inputs_fingerprint: str
    rules_fingerprint: str

    @property
    def total_employee_deductions(self) -> Decimal:
        return self.paye.paye_this_period + self.levy + self.contribution.employee_contribution

    @property
    def warnings(self) -> list[str]:
        return list(self.paye.warnings)


@dataclass
class BatchCalculationResult:
    """Per-employee outcomes of a batch; failures do not abort the batch."""

    results: dict[UUID, StatutoryDeductions] = field(default_factory=dict)
    errors: dict[UUID, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> list[UUID]:
        return list(self.results)

    @property
    def failed(self) -> list[UUID]:
        return list(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)
