"""Leave policy and per-year leave balance models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statutory_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from statutory_payroll.models.employee import Employee


class LeavePolicy(Base, TimestampMixin):
    """Tenant leave policy. Changes apply to balances created afterwards."""

    __tablename__ = "leave_policy"

    leave_policy_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(nullable=False, unique=True)
    annual_leave_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    carry_over_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0"))
    sick_leave_days_before_cert: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("0")
    )
    maternity_leave_days: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("0")
    )
    paternity_leave_days: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("0")
    )


class LeaveBalance(Base, TimestampMixin):
    """Leave balance for one employee and calendar year."""

    __tablename__ = "leave_balance"

    balance_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    annual_total: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    annual_used: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    annual_balance: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    annual_carry_over: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0")
    )
    sick_used: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    maternity_used: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0")
    )
    paternity_used: Mapped[Decimal] = mapped_column(
        Numeric(8, 2), nullable=False, default=Decimal("0")
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "year", name="leave_balance_employee_year_unique"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="leave_balances")

    @property
    def key(self) -> tuple[UUID, int]:
        """Single-writer key for this balance."""
        return (self.employee_id, self.year)
