"""Capped social-security (NSSA) contributions."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from statutory_payroll.calculators.table_resolver import ContributionRateResolver
from statutory_payroll.calculators.tax_calculator import round_money
from statutory_payroll.calculators.types import ContributionResult
from statutory_payroll.models import ContributionRate
from statutory_payroll.repositories import StatutoryRepository


def calculate_contribution(pay: Decimal, rate: ContributionRate) -> ContributionResult:
    """Apply employee and employer rates to pay, capping the base.

    When ``max_cap`` is set and pay exceeds it, both contributions are taken
    on the cap. Each side is rounded to cents on its own.
    """
    capped = rate.max_cap is not None and pay > rate.max_cap
    contributory_pay = rate.max_cap if capped else pay

    employee = round_money(contributory_pay * rate.employee_rate)
    employer = round_money(contributory_pay * rate.employer_rate)

    if pay > 0:
        effective_employee_rate = round_money(employee / pay * 100)
        effective_employer_rate = round_money(employer / pay * 100)
    else:
        effective_employee_rate = Decimal("0.00")
        effective_employer_rate = Decimal("0.00")

    lines = [
        "NSSA Calculation Breakdown:",
        "---------------------------",
        f"Gross Pay: {round_money(pay)}",
    ]
    if capped:
        lines.append(f"Cap Applied: {round_money(rate.max_cap)}")
    lines.extend(
        [
            f"Contributory Pay: {round_money(contributory_pay)}",
            f"Employee Rate: {round_money(rate.employee_rate * 100)}% -> {employee}",
            f"Employer Rate: {round_money(rate.employer_rate * 100)}% -> {employer}",
            f"Total Contribution: {employee + employer}",
        ]
    )

    return ContributionResult(
        employee_contribution=employee,
        employer_contribution=employer,
        contributory_pay=contributory_pay,
        capped=capped,
        effective_employee_rate=effective_employee_rate,
        effective_employer_rate=effective_employer_rate,
        explanation="\n".join(lines),
        contribution_rate_id=rate.contribution_rate_id,
    )


class ContributionCalculator:
    """Resolves the effective contribution rate and applies it."""

    def __init__(self, repository: StatutoryRepository):
        self.resolver = ContributionRateResolver(repository)

    async def calculate_for_period(
        self,
        pay: Decimal,
        tenant_id: UUID,
        currency: str,
        on_date: date,
    ) -> ContributionResult:
        """Raises NotConfiguredError if no rate is effective."""
        rate = await self.resolver.resolve(tenant_id, currency, on_date)
        return calculate_contribution(pay, rate)
