"""Data access for the statutory core."""

from statutory_payroll.repositories.base import StatutoryRepository
from statutory_payroll.repositories.sqlalchemy_repository import SqlAlchemyRepository

__all__ = ["StatutoryRepository", "SqlAlchemyRepository"]
