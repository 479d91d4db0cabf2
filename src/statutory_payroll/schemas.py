"""Pydantic documents for importing statutory configuration."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from statutory_payroll.calculators.tax_calculator import parse_brackets, validate_brackets
from statutory_payroll.calculators.types import TaxBracket


# ============================================================================
# Effective-dated configuration
# ============================================================================


class EffectiveRange(BaseModel):
    """Half-open ``[effective_from, effective_to)`` range; ``None`` is open-ended."""

    effective_from: date
    effective_to: date | None = None

    @model_validator(mode="after")
    def check_range(self) -> EffectiveRange:
        if self.effective_to is not None and self.effective_to <= self.effective_from:
            raise ValueError("effective_to must be after effective_from")
        return self


class BracketDocument(BaseModel):
    """One bracket row. ``max`` is ``None`` for the top bracket."""

    min: Decimal = Field(ge=0)
    max: Decimal | None = None
    fixed: Decimal = Field(default=Decimal("0"), ge=0)
    rate: Decimal = Field(ge=0, le=1)


class TaxTableDocument(EffectiveRange):
    """A tenant's PAYE bracket schedule for one currency."""

    tenant_id: UUID
    currency: str = Field(min_length=3, max_length=3)
    name: str | None = None
    brackets: list[BracketDocument] = Field(min_length=1)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def check_brackets(self) -> TaxTableDocument:
        errors = validate_brackets(self.to_brackets())
        if errors:
            raise ValueError("; ".join(errors))
        return self

    def bracket_payload(self) -> list[dict[str, str | None]]:
        """Brackets in the JSON shape stored on ``TaxTable.brackets``."""
        return [b.to_dict() for b in self.to_brackets()]

    def to_brackets(self) -> list[TaxBracket]:
        return parse_brackets([b.model_dump() for b in self.brackets])


class ContributionRateDocument(EffectiveRange):
    """Social-security rates for a tenant and currency."""

    tenant_id: UUID
    currency: str = Field(min_length=3, max_length=3)
    employee_rate: Decimal = Field(ge=0, le=1)
    employer_rate: Decimal = Field(ge=0, le=1)
    max_cap: Decimal | None = Field(default=None, gt=0)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


# ============================================================================
# Currency rates and leave policy
# ============================================================================


class CurrencyRateDocument(BaseModel):
    """A directional exchange rate."""

    tenant_id: UUID
    from_currency: str = Field(min_length=3, max_length=3)
    to_currency: str = Field(min_length=3, max_length=3)
    rate: Decimal = Field(gt=0)
    effective_date: date
    source: str = "manual"

    @field_validator("from_currency", "to_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def check_direction(self) -> CurrencyRateDocument:
        if self.from_currency == self.to_currency:
            raise ValueError("from_currency and to_currency must differ")
        return self


class LeavePolicyDocument(BaseModel):
    """Tenant leave policy. Defaults mirror the standard policy."""

    model_config = ConfigDict(from_attributes=True)

    tenant_id: UUID
    annual_leave_days: Decimal = Field(default=Decimal("22"), ge=0)
    carry_over_days: Decimal = Field(default=Decimal("5"), ge=0)
    sick_leave_days_before_cert: Decimal = Field(default=Decimal("2"), ge=0)
    maternity_leave_days: Decimal = Field(default=Decimal("98"), ge=0)
    paternity_leave_days: Decimal = Field(default=Decimal("7"), ge=0)


class TenantConfiguration(BaseModel):
    """Everything needed to seed one tenant's statutory configuration."""

    tax_tables: list[TaxTableDocument] = Field(default_factory=list)
    contribution_rates: list[ContributionRateDocument] = Field(default_factory=list)
    currency_rates: list[CurrencyRateDocument] = Field(default_factory=list)
    leave_policy: LeavePolicyDocument | None = None
