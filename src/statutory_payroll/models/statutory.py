"""Effective-dated statutory configuration: tax tables and contribution rates."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from statutory_payroll.models.base import Base, EffectiveDatedMixin, TimestampMixin


class TaxTable(Base, EffectiveDatedMixin, TimestampMixin):
    """PAYE bracket schedule for a tenant and currency.

    Brackets are stored as JSON with string amounts:
    [
        {"min": "0", "max": "7200", "fixed": "0", "rate": "0"},
        {"min": "7200", "max": "14400", "fixed": "0", "rate": "0.20"},
        ...
        {"min": "36000", "max": null, "fixed": "6840", "rate": "0.30"}
    ]

    A table is immutable once a posted pay period has used it; new rates are
    appended as a new table with its own effective range.
    """

    __tablename__ = "tax_table"

    tax_table_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    brackets: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)

    __table_args__ = (
        Index("tax_table_lookup_idx", "tenant_id", "currency", "effective_from"),
        CheckConstraint(
            "effective_to IS NULL OR effective_to > effective_from",
            name="tax_table_effective_range_check",
        ),
    )


class ContributionRate(Base, EffectiveDatedMixin, TimestampMixin):
    """Social-security (NSSA) contribution rates with an optional base cap."""

    __tablename__ = "contribution_rate"

    contribution_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    employee_rate: Mapped[Decimal] = mapped_column(Numeric(8, 6), nullable=False)
    employer_rate: Mapped[Decimal] = mapped_column(Numeric(8, 6), nullable=False)
    max_cap: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    __table_args__ = (
        Index("contribution_rate_lookup_idx", "tenant_id", "currency", "effective_from"),
        CheckConstraint(
            "employee_rate >= 0 AND employer_rate >= 0",
            name="contribution_rate_non_negative_check",
        ),
        CheckConstraint(
            "effective_to IS NULL OR effective_to > effective_from",
            name="contribution_rate_effective_range_check",
        ),
    )
