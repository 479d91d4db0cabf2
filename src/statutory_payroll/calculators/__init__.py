"""Statutory calculators.

The orchestrating ``StatutoryEngine`` lives in
``statutory_payroll.calculators.engine``.
"""

from statutory_payroll.calculators.contribution_calculator import calculate_contribution
from statutory_payroll.calculators.leave_accrual import accrued_leave_days, working_days
from statutory_payroll.calculators.tax_calculator import (
    calculate_levy,
    calculate_progressive_tax,
    find_applicable_bracket,
    validate_brackets,
)
from statutory_payroll.calculators.types import PayPeriod, TaxBracket

__all__ = [
    "PayPeriod",
    "TaxBracket",
    "accrued_leave_days",
    "calculate_contribution",
    "calculate_levy",
    "calculate_progressive_tax",
    "find_applicable_bracket",
    "validate_brackets",
    "working_days",
]
