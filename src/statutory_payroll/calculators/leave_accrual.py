"""Leave accrual from hire date, and working-day counting for requests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

# Day of month from which the current month counts as accrued.
MID_MONTH_DAY = 15


def accrued_leave_days(hire_date: date, annual_leave_days: Decimal, as_of: date) -> Decimal:
    """Leave accrued by ``as_of`` at ``annual_leave_days / 12`` per month.

    Only employees hired in the ``as_of`` year are prorated: whole months
    since the hire month, plus one more month once the current day of month
    reaches the 15th. Anyone hired in an earlier year has the full annual
    entitlement; there is no further proration after the hire year.
    A hire date after ``as_of`` accrues nothing.
    """
    if hire_date > as_of:
        return Decimal("0")

    if hire_date.year < as_of.year:
        return annual_leave_days

    months_worked = max(0, (as_of.year - hire_date.year) * 12 + (as_of.month - hire_date.month))
    mid_month_bonus = 1 if as_of.day >= MID_MONTH_DAY else 0
    monthly_accrual = annual_leave_days / 12
    return (months_worked + mid_month_bonus) * monthly_accrual


def working_days(start: date, end: date, half_day: bool = False) -> Decimal:
    """Count Monday-Friday days from ``start`` to ``end`` inclusive.

    A half-day request takes half a day off the count.
    """
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)

    days = Decimal(count)
    if half_day and days > 0:
        days -= Decimal("0.5")
    return days
