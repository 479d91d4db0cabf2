"""Effective-date resolution of tax tables and contribution rates."""

from __future__ import annotations

from datetime import date
from typing import Iterable, TypeVar
from uuid import UUID

from statutory_payroll.errors import NotConfiguredError
from statutory_payroll.models import ContributionRate, EffectiveDatedMixin, TaxTable
from statutory_payroll.repositories import StatutoryRepository

T = TypeVar("T", bound=EffectiveDatedMixin)


def select_effective(records: Iterable[T], on_date: date) -> T | None:
    """Pick the record effective on ``on_date``.

    Candidates satisfy ``effective_from <= on_date < effective_to`` (or an
    open ``effective_to``); the latest ``effective_from`` wins.
    """
    candidates = [r for r in records if r.is_effective_on(on_date)]
    if not candidates:
        return None
    return max(candidates, key=lambda r: r.effective_from)


class TaxTableResolver:
    """Resolves the PAYE bracket schedule for a tenant, currency and date."""

    def __init__(self, repository: StatutoryRepository):
        self.repository = repository

    async def resolve(self, tenant_id: UUID, currency: str, on_date: date) -> TaxTable:
        """Get the effective tax table.

        Raises:
            NotConfiguredError: If no table applies. Never defaults to zero tax.
        """
        tables = await self.repository.get_tax_tables(tenant_id, currency, on_date)
        table = select_effective(tables, on_date)
        if table is None:
            raise NotConfiguredError("tax table", tenant_id, currency, on_date)
        return table


class ContributionRateResolver:
    """Resolves social-security contribution rates by the same date rule."""

    def __init__(self, repository: StatutoryRepository):
        self.repository = repository

    async def resolve(
        self, tenant_id: UUID, currency: str, on_date: date
    ) -> ContributionRate:
        """Get the effective contribution rate.

        Raises:
            NotConfiguredError: If no rate applies.
        """
        rates = await self.repository.get_contribution_rates(tenant_id, currency, on_date)
        rate = select_effective(rates, on_date)
        if rate is None:
            raise NotConfiguredError("contribution rate", tenant_id, currency, on_date)
        return rate
