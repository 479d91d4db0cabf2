"""Statutory payroll services."""

from statutory_payroll.services.config_import import ConfigImportService, ImportSummary
from statutory_payroll.services.leave_balance_service import (
    InitializeResult,
    LeaveBalanceResult,
    LeaveBalanceService,
    LeaveBatchResult,
)
from statutory_payroll.services.locking import KeyedLock

__all__ = [
    "ConfigImportService",
    "ImportSummary",
    "InitializeResult",
    "KeyedLock",
    "LeaveBalanceResult",
    "LeaveBalanceService",
    "LeaveBatchResult",
]
