"""Base model class for SQLAlchemy ORM."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Date, DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        UUID: Uuid(as_uuid=True),
        datetime: DateTime(timezone=True),
    }

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class TimestampMixin:
    """Mixin for models with created_at timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class EffectiveDatedMixin:
    """Mixin for configuration records selected by effective date.

    The effective range is half-open: ``effective_from <= d < effective_to``,
    with a null ``effective_to`` meaning open-ended.
    """

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    def is_effective_on(self, on_date: date) -> bool:
        """Check if this record applies on the given date."""
        if on_date < self.effective_from:
            return False
        return self.effective_to is None or on_date < self.effective_to

    def overlaps(self, effective_from: date, effective_to: date | None) -> bool:
        """Check if another effective range intersects this one."""
        starts_before_end = self.effective_to is None or effective_from < self.effective_to
        ends_after_start = effective_to is None or self.effective_from < effective_to
        return starts_before_end and ends_after_start
