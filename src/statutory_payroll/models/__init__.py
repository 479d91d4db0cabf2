"""ORM models for the statutory payroll core."""

from statutory_payroll.models.base import Base, EffectiveDatedMixin, TimestampMixin
from statutory_payroll.models.currency import CurrencyRate
from statutory_payroll.models.employee import Employee
from statutory_payroll.models.leave import LeaveBalance, LeavePolicy
from statutory_payroll.models.statutory import ContributionRate, TaxTable

__all__ = [
    "Base",
    "EffectiveDatedMixin",
    "TimestampMixin",
    "ContributionRate",
    "CurrencyRate",
    "Employee",
    "LeaveBalance",
    "LeavePolicy",
    "TaxTable",
]
