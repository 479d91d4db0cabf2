"""Statutory payroll core: PAYE, levy, social security, currency and leave."""

__version__ = "0.1.0"
