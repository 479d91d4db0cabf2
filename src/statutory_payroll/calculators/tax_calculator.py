"""Progressive (marginal-rate) tax calculation over bracket schedules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Sequence

from statutory_payroll.calculators.types import TaxBracket

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round to cents using ROUND_HALF_UP."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_brackets(payload: Sequence[dict[str, Any]]) -> list[TaxBracket]:
    """Parse stored JSON brackets into TaxBracket objects, ascending by min."""
    brackets = [
        TaxBracket(
            min_amount=Decimal(str(b["min"])),
            max_amount=Decimal(str(b["max"])) if b.get("max") is not None else None,
            rate=Decimal(str(b["rate"])),
            fixed_amount=Decimal(str(b.get("fixed", 0))),
        )
        for b in payload
    ]
    return sorted(brackets, key=lambda b: b.min_amount)


def calculate_progressive_tax(income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Calculate cumulative tax owed on ``income`` under marginal rates.

    Brackets are walked in ascending order. Each bracket's ``fixed_amount``
    already carries the tax on everything below its ``min_amount``, so the
    result is the anchored amount of the highest bracket the income reaches
    plus that bracket's slice at its marginal rate.

    An income exactly on a boundary stays in the lower bracket: the walk
    stops as soon as ``income <= bracket.max_amount``.

    The result is not rounded; callers round the figure they report.
    """
    if income <= 0:
        return Decimal("0")

    tax = Decimal("0")
    for bracket in brackets:
        if income <= bracket.min_amount:
            break

        upper = income if bracket.max_amount is None else min(income, bracket.max_amount)
        tax = bracket.fixed_amount + (upper - bracket.min_amount) * bracket.rate

        if bracket.max_amount is not None and income <= bracket.max_amount:
            break

    return tax


def find_applicable_bracket(
    income: Decimal, brackets: Sequence[TaxBracket]
) -> TaxBracket | None:
    """Find the bracket whose marginal rate applies to ``income``.

    Uses the same boundary rule as :func:`calculate_progressive_tax`: a value
    on a boundary belongs to the lower bracket. Incomes of zero or below
    report the first bracket.
    """
    if not brackets:
        return None

    for bracket in brackets:
        if bracket.max_amount is None or income <= bracket.max_amount:
            return bracket

    return brackets[-1]


def validate_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
    """Validate a bracket schedule, returning any errors.

    Returns list of error messages (empty if valid).
    """
    if not brackets:
        return ["Bracket schedule is empty"]

    errors: list[str] = []

    if brackets[0].min_amount != 0:
        errors.append(f"First bracket must start at 0, not {brackets[0].min_amount}")

    last = len(brackets) - 1
    for i, bracket in enumerate(brackets):
        if bracket.rate < 0:
            errors.append(f"Bracket {i} has a negative rate")
        if bracket.max_amount is not None and bracket.max_amount <= bracket.min_amount:
            errors.append(f"Bracket {i} max must be greater than its min")
        if i == last:
            if bracket.max_amount is not None:
                errors.append("Final bracket must be unbounded")
            continue

        following = brackets[i + 1]
        if bracket.max_amount is None:
            errors.append(f"Bracket {i} is unbounded but is not the final bracket")
        elif bracket.max_amount != following.min_amount:
            errors.append(
                f"Brackets {i} and {i + 1} are not contiguous "
                f"({bracket.max_amount} != {following.min_amount})"
            )

    if errors:
        return errors

    # fixed_amount must equal the tax at the bracket's own lower bound
    for i, bracket in enumerate(brackets):
        expected = calculate_progressive_tax(bracket.min_amount, brackets)
        if bracket.fixed_amount != expected:
            errors.append(
                f"Bracket {i} fixed amount {bracket.fixed_amount} does not match "
                f"tax at {bracket.min_amount} ({expected})"
            )

    return errors


def calculate_levy(paye: Decimal, levy_rate: Decimal) -> Decimal:
    """Flat levy charged as a percentage of PAYE, rounded to cents."""
    return round_money(paye * levy_rate)
