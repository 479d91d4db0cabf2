"""Historical exchange-rate resolution and currency conversion."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from statutory_payroll.calculators.tax_calculator import round_money
from statutory_payroll.errors import RateNotFoundError
from statutory_payroll.models import CurrencyRate
from statutory_payroll.repositories import StatutoryRepository


def select_latest_rate(rates: Iterable[CurrencyRate], on_date: date | None) -> CurrencyRate | None:
    """Most recent rate with ``effective_date <= on_date``. No interpolation."""
    candidates = [r for r in rates if on_date is None or r.effective_date <= on_date]
    if not candidates:
        return None
    return max(candidates, key=lambda r: r.effective_date)


class CurrencyRateResolver:
    """Resolves directional exchange rates by effective date.

    Rates are never inverted: a USD->ZWL lookup does not use a ZWL->USD
    record. Store both directions when both conversions are needed.
    """

    def __init__(self, repository: StatutoryRepository):
        self.repository = repository

    async def resolve(
        self,
        tenant_id: UUID,
        from_currency: str,
        to_currency: str,
        on_date: date,
    ) -> CurrencyRate:
        """Get the rate in force on ``on_date``.

        Raises:
            RateNotFoundError: If no rate is effective on or before the date.
        """
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        rates = await self.repository.get_currency_rates(
            tenant_id, from_currency, to_currency, on_date
        )
        rate = select_latest_rate(rates, on_date)
        if rate is None:
            raise RateNotFoundError(tenant_id, from_currency, to_currency, on_date)
        return rate

    async def latest(self, tenant_id: UUID, from_currency: str, to_currency: str) -> CurrencyRate:
        """Get the most recent rate regardless of date."""
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        rates = await self.repository.get_currency_rates(tenant_id, from_currency, to_currency)
        rate = select_latest_rate(rates, None)
        if rate is None:
            raise RateNotFoundError(tenant_id, from_currency, to_currency, None)
        return rate


class CurrencyConverter:
    """Converts amounts using the historical rate for a date."""

    def __init__(self, repository: StatutoryRepository):
        self.resolver = CurrencyRateResolver(repository)

    async def convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        on_date: date,
        tenant_id: UUID,
    ) -> Decimal:
        """Convert ``amount`` into ``to_currency``, rounded to cents.

        Currency codes are compared case-insensitively. Same-currency
        conversion returns the amount unchanged without a lookup.

        Raises:
            RateNotFoundError: Propagated from the resolver; parity is never assumed.
        """
        if from_currency.upper() == to_currency.upper():
            return amount

        rate = await self.resolver.resolve(tenant_id, from_currency, to_currency, on_date)
        return round_money(amount * rate.rate)
