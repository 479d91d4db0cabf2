"""Import of statutory configuration documents.

Tax tables and contribution rates are append-only: a new effective range is
added next to the old ones, and a range that overlaps an existing record of
the same tenant and currency is refused. Currency rates are appended too, one
per currency pair and effective date. Leave policy is upserted and only
affects balances created afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from statutory_payroll.errors import ConfigurationImportError
from statutory_payroll.models import (
    ContributionRate,
    CurrencyRate,
    EffectiveDatedMixin,
    LeavePolicy,
    TaxTable,
)
from statutory_payroll.repositories import StatutoryRepository
from statutory_payroll.schemas import (
    ContributionRateDocument,
    CurrencyRateDocument,
    EffectiveRange,
    LeavePolicyDocument,
    TaxTableDocument,
    TenantConfiguration,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    """Counts of records written by a tenant import."""

    tax_tables: int = 0
    contribution_rates: int = 0
    currency_rates: int = 0
    leave_policy_updated: bool = False
    skipped: list[str] = field(default_factory=list)


def _find_overlap(
    existing: list[EffectiveDatedMixin], document: EffectiveRange
) -> EffectiveDatedMixin | None:
    for record in existing:
        if record.overlaps(document.effective_from, document.effective_to):
            return record
    return None


class ConfigImportService:
    """Writes validated configuration documents through the repository."""

    def __init__(self, repository: StatutoryRepository):
        self.repository = repository

    async def import_tax_table(self, document: TaxTableDocument) -> TaxTable:
        """Append a tax table.

        Raises:
            ConfigurationImportError: If the range overlaps an existing table.
        """
        existing = list(await self.repository.get_tax_tables(document.tenant_id, document.currency))
        clash = _find_overlap(existing, document)
        if clash is not None:
            raise ConfigurationImportError(
                f"Tax table for {document.currency} effective {document.effective_from} "
                f"overlaps table effective {clash.effective_from}"
            )

        table = TaxTable(
            tax_table_id=uuid4(),
            tenant_id=document.tenant_id,
            name=document.name,
            currency=document.currency,
            brackets=document.bracket_payload(),
            effective_from=document.effective_from,
            effective_to=document.effective_to,
        )
        await self.repository.add(table)
        logger.info(
            "Imported %s tax table for tenant %s effective %s",
            document.currency,
            document.tenant_id,
            document.effective_from,
        )
        return table

    async def import_contribution_rate(self, document: ContributionRateDocument) -> ContributionRate:
        """Append a contribution rate.

        Raises:
            ConfigurationImportError: If the range overlaps an existing rate.
        """
        existing = list(
            await self.repository.get_contribution_rates(document.tenant_id, document.currency)
        )
        clash = _find_overlap(existing, document)
        if clash is not None:
            raise ConfigurationImportError(
                f"Contribution rate for {document.currency} effective {document.effective_from} "
                f"overlaps rate effective {clash.effective_from}"
            )

        rate = ContributionRate(
            contribution_rate_id=uuid4(),
            tenant_id=document.tenant_id,
            currency=document.currency,
            employee_rate=document.employee_rate,
            employer_rate=document.employer_rate,
            max_cap=document.max_cap,
            effective_from=document.effective_from,
            effective_to=document.effective_to,
        )
        await self.repository.add(rate)
        logger.info(
            "Imported %s contribution rate for tenant %s effective %s",
            document.currency,
            document.tenant_id,
            document.effective_from,
        )
        return rate

    async def import_currency_rate(self, document: CurrencyRateDocument) -> CurrencyRate:
        """Add a directional rate. One rate per pair per effective date.

        Raises:
            ConfigurationImportError: If the pair already has a rate on that date.
        """
        existing = await self.repository.get_currency_rates(
            document.tenant_id, document.from_currency, document.to_currency
        )
        if any(r.effective_date == document.effective_date for r in existing):
            raise ConfigurationImportError(
                f"Currency rate {document.from_currency}->{document.to_currency} "
                f"effective {document.effective_date} already exists"
            )

        rate = CurrencyRate(
            currency_rate_id=uuid4(),
            tenant_id=document.tenant_id,
            from_currency=document.from_currency,
            to_currency=document.to_currency,
            rate=document.rate,
            effective_date=document.effective_date,
            source=document.source,
        )
        await self.repository.add(rate)
        return rate

    async def upsert_leave_policy(self, document: LeavePolicyDocument) -> LeavePolicy:
        """Create or replace the tenant's leave policy.

        Existing balances keep the figures they were created with.
        """
        values = document.model_dump(exclude={"tenant_id"})
        policy = await self.repository.get_leave_policy(document.tenant_id)

        if policy is None:
            policy = LeavePolicy(leave_policy_id=uuid4(), tenant_id=document.tenant_id, **values)
            await self.repository.add(policy)
        else:
            for name, value in values.items():
                setattr(policy, name, value)
            await self.repository.save(policy)

        logger.info(
            "Leave policy for tenant %s set to %s annual days",
            document.tenant_id,
            policy.annual_leave_days,
        )
        return policy

    async def import_tenant(
        self, configuration: TenantConfiguration, skip_existing: bool = False
    ) -> ImportSummary:
        """Import a whole tenant configuration.

        With ``skip_existing`` an overlapping tax table or contribution rate,
        or a currency rate already present for its date, is recorded in
        ``skipped`` instead of failing the import, so a seed file can be re-run.
        """
        summary = ImportSummary()

        for table_doc in configuration.tax_tables:
            try:
                await self.import_tax_table(table_doc)
            except ConfigurationImportError as e:
                if not skip_existing:
                    raise
                summary.skipped.append(str(e))
                continue
            summary.tax_tables += 1

        for rate_doc in configuration.contribution_rates:
            try:
                await self.import_contribution_rate(rate_doc)
            except ConfigurationImportError as e:
                if not skip_existing:
                    raise
                summary.skipped.append(str(e))
                continue
            summary.contribution_rates += 1

        for currency_doc in configuration.currency_rates:
            try:
                await self.import_currency_rate(currency_doc)
            except ConfigurationImportError as e:
                if not skip_existing:
                    raise
                summary.skipped.append(str(e))
                continue
            summary.currency_rates += 1

        if configuration.leave_policy is not None:
            await self.upsert_leave_policy(configuration.leave_policy)
            summary.leave_policy_updated = True

        return summary
