"""PAYE engine: annualized progressive tax with year-to-date tracking."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

from statutory_payroll.calculators.table_resolver import TaxTableResolver
from statutory_payroll.calculators.tax_calculator import (
    calculate_levy,
    calculate_progressive_tax,
    find_applicable_bracket,
    parse_brackets,
    round_money,
)
from statutory_payroll.calculators.types import PAYEInput, PAYEResult, PayPeriod, TaxBracket
from statutory_payroll.config import DEFAULT_PERIOD_MULTIPLIER, Settings, get_settings
from statutory_payroll.errors import InvalidPeriodError
from statutory_payroll.repositories import StatutoryRepository

logger = logging.getLogger(__name__)


def resolve_period_multiplier(
    period: PayPeriod | str, strict: bool = False
) -> tuple[int, str | None]:
    """Map a pay period code to its annualization multiplier.

    Returns (multiplier, warning). An unrecognized code falls back to the
    monthly multiplier and returns a warning for the caller, unless
    ``strict`` is set, in which case it raises.

    Raises:
        InvalidPeriodError: If the code is unknown and ``strict`` is True.
    """
    if isinstance(period, PayPeriod):
        return period.multiplier, None

    try:
        code = PayPeriod(str(period).upper())
    except ValueError:
        if strict:
            raise InvalidPeriodError(str(period)) from None
        warning = (
            f"Unrecognized pay period '{period}'; "
            f"using default multiplier {DEFAULT_PERIOD_MULTIPLIER}"
        )
        logger.warning(warning)
        return DEFAULT_PERIOD_MULTIPLIER, warning

    return code.multiplier, None


def compute_period_paye(
    taxable_income: Decimal,
    period: PayPeriod | str,
    ytd_taxable: Decimal,
    ytd_paye: Decimal,
    brackets: Sequence[TaxBracket],
    strict_periods: bool = False,
) -> PAYEResult:
    """Compute one period's PAYE from an already-resolved bracket schedule.

    Only this period's income is annualized; it is added to ``ytd_taxable``
    as passed in. The period's tax is the increase in annual tax caused by
    that addition, de-annualized, floored at zero and rounded to cents.
    """
    warnings: list[str] = []
    multiplier, warning = resolve_period_multiplier(period, strict_periods)
    if warning:
        warnings.append(warning)

    factor = Decimal(multiplier)
    annualized_income = taxable_income * factor
    annualized_ytd = ytd_taxable + annualized_income

    previous_annual_tax = calculate_progressive_tax(ytd_taxable, brackets)
    annual_tax = calculate_progressive_tax(annualized_ytd, brackets)
    tax_increment = annual_tax - previous_annual_tax

    # No refunds from this engine: a large YTD true-up floors at zero
    paye = round_money(max(Decimal("0"), tax_increment / factor))

    if annualized_ytd > 0:
        effective_rate = round_money(annual_tax / annualized_ytd * 100)
    else:
        effective_rate = Decimal("0.00")

    applied_bracket = find_applicable_bracket(annualized_ytd, brackets)

    explanation = _explain(
        taxable_income=taxable_income,
        period=period,
        multiplier=multiplier,
        annualized_income=annualized_income,
        annualized_ytd=annualized_ytd,
        previous_annual_tax=previous_annual_tax,
        annual_tax=annual_tax,
        tax_increment=tax_increment,
        paye=paye,
        effective_rate=effective_rate,
        applied_bracket=applied_bracket,
    )

    return PAYEResult(
        paye_this_period=paye,
        updated_ytd_taxable=ytd_taxable + taxable_income,
        updated_ytd_paye=ytd_paye + paye,
        effective_tax_rate=effective_rate,
        applied_bracket=applied_bracket,
        explanation=explanation,
        warnings=warnings,
    )


class PAYEEngine:
    """PAYE calculation for a single pay period.

    Pipeline:
    1) Resolve the tax table effective for tenant, currency and period date
    2) Annualize this period's income by the period multiplier
    3) Annual tax after minus annual tax before (YTD basis) = increment
    4) De-annualize, floor at zero, round to cents
    5) Carry YTD forward with actual (unannualized) income
    """

    def __init__(self, repository: StatutoryRepository, settings: Settings | None = None):
        self.repository = repository
        self.resolver = TaxTableResolver(repository)
        self.settings = settings or get_settings()

    async def calculate_paye(self, paye_input: PAYEInput) -> PAYEResult:
        """Calculate PAYE for one employee and one period.

        Raises:
            NotConfiguredError: If no tax table is effective.
            InvalidPeriodError: If the period is unknown and strict periods are on.
        """
        table = await self.resolver.resolve(
            paye_input.tenant_id, paye_input.currency, paye_input.period_date
        )
        brackets = parse_brackets(table.brackets)

        result = compute_period_paye(
            taxable_income=paye_input.taxable_income,
            period=paye_input.period,
            ytd_taxable=paye_input.ytd_taxable,
            ytd_paye=paye_input.ytd_paye,
            brackets=brackets,
            strict_periods=self.settings.strict_pay_periods,
        )
        result.tax_table_id = table.tax_table_id

        logger.debug(
            "PAYE %s for tenant %s using tax table %s",
            result.paye_this_period,
            paye_input.tenant_id,
            table.tax_table_id,
        )
        return result

    def calculate_levy(self, paye: Decimal) -> Decimal:
        """Levy on PAYE at the configured rate."""
        return calculate_levy(paye, self.settings.levy_rate)


def _explain(
    *,
    taxable_income: Decimal,
    period: PayPeriod | str,
    multiplier: int,
    annualized_income: Decimal,
    annualized_ytd: Decimal,
    previous_annual_tax: Decimal,
    annual_tax: Decimal,
    tax_increment: Decimal,
    paye: Decimal,
    effective_rate: Decimal,
    applied_bracket: TaxBracket | None,
) -> str:
    """Human-readable PAYE breakdown for audit display."""
    period_code = period.value if isinstance(period, PayPeriod) else str(period)
    bracket = applied_bracket.describe() if applied_bracket else "None"
    lines = [
        "PAYE Calculation Breakdown:",
        "---------------------------",
        f"Period Income: {round_money(taxable_income)}",
        f"Pay Period: {period_code} (x{multiplier})",
        f"Annualized Income: {round_money(annualized_income)}",
        f"YTD Annualized Total: {round_money(annualized_ytd)}",
        "",
        f"Previous Annual Tax: {round_money(previous_annual_tax)}",
        f"New Annual Tax: {round_money(annual_tax)}",
        f"Incremental Tax: {round_money(tax_increment)}",
        "",
        f"PAYE This Period: {paye}",
        f"Effective Tax Rate: {effective_rate}%",
        "",
        f"Applied Bracket: {bracket}",
    ]
    return "\n".join(lines)
