"""Statutory calculation engine - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from statutory_payroll.calculators.contribution_calculator import (
    ContributionCalculator,
    calculate_contribution,
)
from statutory_payroll.calculators.currency import CurrencyConverter
from statutory_payroll.calculators.leave_accrual import accrued_leave_days
from statutory_payroll.calculators.paye_engine import PAYEEngine
from statutory_payroll.calculators.types import (
    BatchCalculationResult,
    ContributionResult,
    EmployeePeriodInput,
    PAYEInput,
    PAYEResult,
    PayPeriod,
    StatutoryDeductions,
)
from statutory_payroll.config import Settings, get_settings
from statutory_payroll.errors import StatutoryError
from statutory_payroll.models import ContributionRate
from statutory_payroll.repositories import StatutoryRepository
from statutory_payroll.services.leave_balance_service import (
    LeaveBalanceResult,
    LeaveBalanceService,
)
from statutory_payroll.services.locking import KeyedLock

logger = logging.getLogger(__name__)


class StatutoryEngine:
    """Statutory deductions and leave operations for the payroll run.

    All lookups go through the injected repository; the engine holds no
    other state except the leave lock registry.
    """

    def __init__(
        self,
        repository: StatutoryRepository,
        settings: Settings | None = None,
        locks: KeyedLock | None = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()
        self.paye_engine = PAYEEngine(repository, self.settings)
        self.contributions = ContributionCalculator(repository)
        self.converter = CurrencyConverter(repository)
        self.leave = LeaveBalanceService(repository, self.settings, locks)

    async def calculate_paye(self, paye_input: PAYEInput) -> PAYEResult:
        return await self.paye_engine.calculate_paye(paye_input)

    def calculate_levy(self, paye: Decimal) -> Decimal:
        return self.paye_engine.calculate_levy(paye)

    def calculate_contribution(self, pay: Decimal, rate: ContributionRate) -> ContributionResult:
        return calculate_contribution(pay, rate)

    async def convert_currency(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        on_date: date,
        tenant_id: UUID,
    ) -> Decimal:
        return await self.converter.convert(amount, from_currency, to_currency, on_date, tenant_id)

    def accrued_leave_days(
        self, hire_date: date, annual_leave_days: Decimal, as_of: date
    ) -> Decimal:
        return accrued_leave_days(hire_date, annual_leave_days, as_of)

    async def recalculate_leave_balance(
        self, employee_id: UUID, tenant_id: UUID, as_of: date | None = None
    ) -> LeaveBalanceResult:
        """Recalculate the ``as_of`` year's balance; policy fallbacks come back as warnings."""
        return await self.leave.recalculate(employee_id, tenant_id, as_of)

    async def calculate_employee_period(
        self, period_input: EmployeePeriodInput
    ) -> StatutoryDeductions:
        """Calculate PAYE, levy and social security for one employee-period.

        Raises:
            NotConfiguredError: If no tax table or contribution rate applies.
            InvalidPeriodError: If the period is unknown and strict periods are on.
        """
        paye = await self.paye_engine.calculate_paye(
            PAYEInput(
                taxable_income=period_input.taxable_income,
                currency=period_input.currency,
                period=period_input.period,
                ytd_taxable=period_input.ytd_taxable,
                ytd_paye=period_input.ytd_paye,
                period_date=period_input.period_date,
                tenant_id=period_input.tenant_id,
            )
        )
        levy = self.calculate_levy(paye.paye_this_period)
        contribution = await self.contributions.calculate_for_period(
            period_input.gross_pay,
            period_input.tenant_id,
            period_input.currency,
            period_input.period_date,
        )

        inputs_fingerprint = self._compute_inputs_fingerprint(period_input)
        rules_fingerprint = self._compute_rules_fingerprint(
            [paye.tax_table_id, contribution.contribution_rate_id]
        )
        calculation_id = self._generate_calculation_id(
            period_input.employee_id,
            period_input.period_date,
            inputs_fingerprint,
            rules_fingerprint,
        )

        return StatutoryDeductions(
            employee_id=period_input.employee_id,
            calculation_id=calculation_id,
            paye=paye,
            levy=levy,
            contribution=contribution,
            inputs_fingerprint=inputs_fingerprint,
            rules_fingerprint=rules_fingerprint,
        )

    async def calculate_period_batch(
        self, inputs: Iterable[EmployeePeriodInput]
    ) -> BatchCalculationResult:
        """Calculate many employees; a failed employee does not stop the rest.

        Runs sequentially because the repository session is shared.
        """
        batch = BatchCalculationResult()

        for period_input in inputs:
            try:
                result = await self.calculate_employee_period(period_input)
            except StatutoryError as e:
                logger.warning(
                    "Statutory calculation failed for employee %s: %s",
                    period_input.employee_id,
                    e,
                )
                batch.errors[period_input.employee_id] = str(e)
                continue
            batch.results[period_input.employee_id] = result

        logger.info(
            "Statutory batch complete: %d calculated, %d failed",
            len(batch.results),
            batch.error_count,
        )
        return batch

    def _generate_calculation_id(
        self,
        employee_id: UUID,
        period_date: date,
        inputs_fingerprint: str,
        rules_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": str(employee_id),
            "period_date": str(period_date),
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
            "rules_fingerprint": rules_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(self, period_input: EmployeePeriodInput) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        period = period_input.period
        data: dict[str, Any] = {
            "tenant_id": str(period_input.tenant_id),
            "currency": period_input.currency,
            "period": period.value if isinstance(period, PayPeriod) else str(period),
            "gross_pay": str(period_input.gross_pay),
            "taxable_income": str(period_input.taxable_income),
            "ytd_taxable": str(period_input.ytd_taxable),
            "ytd_paye": str(period_input.ytd_paye),
        }
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _compute_rules_fingerprint(self, record_ids: list[UUID | None]) -> str:
        """Compute fingerprint of the tax table and rate records used."""
        json_str = json.dumps(sorted(str(r) for r in record_ids if r is not None))
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
