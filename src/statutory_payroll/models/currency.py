"""Historical exchange rates."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from statutory_payroll.models.base import Base, TimestampMixin


class CurrencyRate(Base, TimestampMixin):
    """Directional exchange rate effective from a date.

    A rate converts ``from_currency`` into ``to_currency`` only. The reverse
    direction is a separate record.
    """

    __tablename__ = "currency_rate"

    currency_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False)
    from_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(20, 10), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False, default="manual")

    __table_args__ = (
        Index(
            "currency_rate_lookup_idx",
            "tenant_id",
            "from_currency",
            "to_currency",
            "effective_date",
        ),
        CheckConstraint("rate > 0", name="currency_rate_positive_check"),
    )
