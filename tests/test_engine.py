"""Unit tests for the statutory engine facade."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from statutory_payroll.calculators.engine import StatutoryEngine
from statutory_payroll.calculators.types import EmployeePeriodInput, PAYEInput, PayPeriod
from statutory_payroll.errors import NotConfiguredError


@pytest.fixture
def engine(repository, settings) -> StatutoryEngine:
    return StatutoryEngine(repository, settings)


@pytest.fixture
def period_input(tenant_id) -> EmployeePeriodInput:
    return EmployeePeriodInput(
        employee_id=uuid4(),
        tenant_id=tenant_id,
        currency="USD",
        period=PayPeriod.MONTHLY,
        period_date=date(2025, 3, 31),
        gross_pay=Decimal("3000"),
        taxable_income=Decimal("3000"),
    )


class TestCalculationIdGeneration:
    """Test deterministic calculation ID generation."""

    def test_same_inputs_produce_same_id(self, engine):
        """Same inputs should always produce the same calculation ID."""
        employee_id = uuid4()
        id1 = engine._generate_calculation_id(employee_id, date(2025, 3, 31), "abc", "def")
        id2 = engine._generate_calculation_id(employee_id, date(2025, 3, 31), "abc", "def")
        assert id1 == id2

    def test_different_inputs_produce_different_id(self, engine):
        employee_id = uuid4()
        id1 = engine._generate_calculation_id(employee_id, date(2025, 3, 31), "abc", "def")
        id2 = engine._generate_calculation_id(employee_id, date(2025, 3, 31), "xyz", "def")
        assert id1 != id2

    def test_engine_version_affects_id(self, repository, settings):
        """Different engine versions should produce different IDs."""
        engine1 = StatutoryEngine(repository, settings)
        engine2 = StatutoryEngine(repository, replace(settings, engine_version="2.0.0"))
        employee_id = uuid4()

        id1 = engine1._generate_calculation_id(employee_id, date(2025, 3, 31), "abc", "def")
        id2 = engine2._generate_calculation_id(employee_id, date(2025, 3, 31), "abc", "def")

        assert id1 != id2


class TestFingerprintGeneration:
    def test_inputs_fingerprint_is_deterministic(self, engine, period_input):
        fp1 = engine._compute_inputs_fingerprint(period_input)
        fp2 = engine._compute_inputs_fingerprint(replace(period_input))
        assert fp1 == fp2
        assert len(fp1) == 32

    def test_ytd_changes_inputs_fingerprint(self, engine, period_input):
        fp1 = engine._compute_inputs_fingerprint(period_input)
        fp2 = engine._compute_inputs_fingerprint(replace(period_input, ytd_taxable=Decimal("3000")))
        assert fp1 != fp2

    def test_rules_fingerprint_ignores_order_and_missing_ids(self, engine):
        a, b = uuid4(), uuid4()
        assert engine._compute_rules_fingerprint([a, b]) == engine._compute_rules_fingerprint(
            [b, None, a]
        )


class TestEmployeePeriod:
    async def test_combines_paye_levy_and_contribution(
        self, engine, period_input, usd_tax_table, usd_contribution_rate
    ):
        result = await engine.calculate_employee_period(period_input)

        assert result.paye.paye_this_period == Decimal("570.00")
        assert result.levy == Decimal("17.10")
        assert result.contribution.employee_contribution == Decimal("30.00")
        assert result.contribution.employer_contribution == Decimal("30.00")
        assert result.total_employee_deductions == Decimal("617.10")
        assert result.warnings == []

    async def test_calculation_is_reproducible(
        self, engine, period_input, usd_tax_table, usd_contribution_rate
    ):
        first = await engine.calculate_employee_period(period_input)
        second = await engine.calculate_employee_period(period_input)

        assert first.calculation_id == second.calculation_id
        assert first.rules_fingerprint == second.rules_fingerprint

    async def test_rules_fingerprint_tracks_records_used(
        self, engine, period_input, usd_tax_table, usd_contribution_rate
    ):
        result = await engine.calculate_employee_period(period_input)
        expected = engine._compute_rules_fingerprint(
            [usd_tax_table.tax_table_id, usd_contribution_rate.contribution_rate_id]
        )
        assert result.rules_fingerprint == expected

    async def test_missing_contribution_rate_aborts(self, engine, period_input, usd_tax_table):
        with pytest.raises(NotConfiguredError) as exc_info:
            await engine.calculate_employee_period(period_input)
        assert exc_info.value.kind == "contribution rate"

    async def test_period_warning_is_surfaced(
        self, engine, period_input, usd_tax_table, usd_contribution_rate
    ):
        result = await engine.calculate_employee_period(replace(period_input, period="MONTHY"))

        assert result.paye.paye_this_period == Decimal("570.00")
        assert len(result.warnings) == 1


class TestPeriodBatch:
    async def test_failure_does_not_abort_batch(
        self, engine, period_input, usd_tax_table, usd_contribution_rate
    ):
        ok = period_input
        unconfigured = replace(period_input, employee_id=uuid4(), currency="ZWL")

        batch = await engine.calculate_period_batch([ok, unconfigured])

        assert batch.succeeded == [ok.employee_id]
        assert batch.failed == [unconfigured.employee_id]
        assert batch.error_count == 1
        assert "ZWL" in batch.errors[unconfigured.employee_id]

    async def test_empty_batch(self, engine):
        batch = await engine.calculate_period_batch([])
        assert batch.results == {}
        assert batch.error_count == 0


class TestFacadeOperations:
    async def test_calculate_paye(self, engine, tenant_id, usd_tax_table):
        result = await engine.calculate_paye(
            PAYEInput(
                taxable_income=Decimal("3000"),
                currency="USD",
                period=PayPeriod.MONTHLY,
                ytd_taxable=Decimal("0"),
                ytd_paye=Decimal("0"),
                period_date=date(2025, 1, 31),
                tenant_id=tenant_id,
            )
        )
        assert result.paye_this_period == Decimal("570.00")

    def test_calculate_contribution(self, engine, usd_contribution_rate):
        result = engine.calculate_contribution(Decimal("1500"), usd_contribution_rate)
        assert result.employee_contribution == Decimal("30.00")

    async def test_convert_currency_identity(self, engine, repository, tenant_id):
        amount = await engine.convert_currency(
            Decimal("99.99"), "ZWL", "ZWL", date(2025, 6, 15), tenant_id
        )
        assert amount == Decimal("99.99")
        assert repository.calls == []

    def test_accrued_leave_days(self, engine):
        accrued = engine.accrued_leave_days(date(2025, 1, 10), Decimal("22"), date(2025, 7, 20))
        assert accrued.quantize(Decimal("0.01")) == Decimal("12.83")

    async def test_recalculate_leave_balance(self, engine, employee, tenant_id, leave_policy):
        result = await engine.recalculate_leave_balance(
            employee.employee_id, tenant_id, date(2025, 7, 20)
        )
        assert result.balance.annual_balance == Decimal("12.83")
        assert result.balance.year == 2025
        assert result.warnings == []

    async def test_recalculate_leave_balance_surfaces_policy_fallback(
        self, engine, employee, tenant_id
    ):
        result = await engine.recalculate_leave_balance(
            employee.employee_id, tenant_id, date(2025, 7, 20)
        )

        assert result.balance.annual_total == Decimal("22.00")
        assert len(result.warnings) == 1
        assert "default of 22 annual days" in result.warnings[0]
