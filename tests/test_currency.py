"""Tests for historical exchange-rate resolution and conversion."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from statutory_payroll.calculators.currency import (
    CurrencyConverter,
    CurrencyRateResolver,
    select_latest_rate,
)
from statutory_payroll.errors import RateNotFoundError
from statutory_payroll.models import CurrencyRate


@pytest.fixture
def add_rate(repository, tenant_id):
    def add(from_currency: str, to_currency: str, rate: str, effective: date) -> CurrencyRate:
        record = CurrencyRate(
            currency_rate_id=uuid4(),
            tenant_id=tenant_id,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=Decimal(rate),
            effective_date=effective,
            source="manual",
        )
        repository.currency_rates.append(record)
        return record

    return add


class TestCurrencyConverter:
    async def test_zwl_to_usd_reference_scenario(self, repository, tenant_id, add_rate):
        """1,000,000 ZWL at 0.00051 on 2025-06-15 is 510.00 USD."""
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        converter = CurrencyConverter(repository)

        amount = await converter.convert(
            Decimal("1000000"), "ZWL", "USD", date(2025, 6, 15), tenant_id
        )

        assert amount == Decimal("510.00")

    async def test_same_currency_is_identity_without_lookup(self, repository, tenant_id):
        converter = CurrencyConverter(repository)

        amount = await converter.convert(
            Decimal("123.456"), "USD", "USD", date(2025, 6, 15), tenant_id
        )

        assert amount == Decimal("123.456")
        assert repository.calls == []

    async def test_identity_ignores_code_case(self, repository, tenant_id):
        converter = CurrencyConverter(repository)

        amount = await converter.convert(Decimal("10"), "usd", "USD", date(2025, 6, 15), tenant_id)

        assert amount == Decimal("10")
        assert repository.calls == []

    async def test_lowercase_codes_find_stored_rate(self, repository, tenant_id, add_rate):
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        converter = CurrencyConverter(repository)

        amount = await converter.convert(
            Decimal("1000000"), "zwl", "usd", date(2025, 6, 15), tenant_id
        )

        assert amount == Decimal("510.00")

    async def test_uses_most_recent_rate_on_or_before_date(
        self, repository, tenant_id, add_rate
    ):
        add_rate("ZWL", "USD", "0.00060", date(2025, 5, 1))
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        add_rate("ZWL", "USD", "0.00040", date(2025, 7, 1))
        converter = CurrencyConverter(repository)

        may = await converter.convert(Decimal("1000000"), "ZWL", "USD", date(2025, 5, 31), tenant_id)
        june_first = await converter.convert(
            Decimal("1000000"), "ZWL", "USD", date(2025, 6, 1), tenant_id
        )

        assert may == Decimal("600.00")
        assert june_first == Decimal("510.00")

    async def test_rates_are_not_inverted(self, repository, tenant_id, add_rate):
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        converter = CurrencyConverter(repository)

        with pytest.raises(RateNotFoundError) as exc_info:
            await converter.convert(Decimal("100"), "USD", "ZWL", date(2025, 6, 15), tenant_id)

        assert exc_info.value.from_currency == "USD"
        assert exc_info.value.to_currency == "ZWL"

    async def test_no_rate_before_date(self, repository, tenant_id, add_rate):
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        converter = CurrencyConverter(repository)

        with pytest.raises(RateNotFoundError):
            await converter.convert(Decimal("100"), "ZWL", "USD", date(2025, 5, 31), tenant_id)

    async def test_other_tenant_rates_are_invisible(self, repository, add_rate):
        add_rate("ZWL", "USD", "0.00051", date(2025, 6, 1))
        converter = CurrencyConverter(repository)

        with pytest.raises(RateNotFoundError):
            await converter.convert(Decimal("100"), "ZWL", "USD", date(2025, 6, 15), uuid4())


class TestCurrencyRateResolver:
    async def test_latest_ignores_date(self, repository, tenant_id, add_rate):
        add_rate("USD", "ZWL", "1900", date(2025, 1, 1))
        newest = add_rate("USD", "ZWL", "1960.78", date(2025, 6, 1))
        resolver = CurrencyRateResolver(repository)

        assert await resolver.latest(tenant_id, "USD", "ZWL") is newest

    async def test_latest_without_rates(self, repository, tenant_id):
        resolver = CurrencyRateResolver(repository)
        with pytest.raises(RateNotFoundError) as exc_info:
            await resolver.latest(tenant_id, "USD", "ZWL")
        assert exc_info.value.on_date is None

    def test_select_latest_rate_empty(self):
        assert select_latest_rate([], date(2025, 1, 1)) is None
