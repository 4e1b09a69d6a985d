"""Payroll calculation."""

from erp_engine.payroll.calculator import PayrollCalculator, validate_period
from erp_engine.payroll.repository import HRRepository
from erp_engine.payroll.schedule import (
    ContributionRule,
    PayrollSchedule,
    ScheduleError,
    TaxBracket,
    get_default_schedule,
    load_schedule,
)
from erp_engine.payroll.service import PayrollService, snapshot_employee
from erp_engine.payroll.types import (
    EmployeeSnapshot,
    PayrollLine,
    PayrollLineCode,
    PayrollOutcome,
    PayrollResult,
)

__all__ = [
    "PayrollCalculator",
    "validate_period",
    "HRRepository",
    "ContributionRule",
    "PayrollSchedule",
    "ScheduleError",
    "TaxBracket",
    "get_default_schedule",
    "load_schedule",
    "PayrollService",
    "snapshot_employee",
    "EmployeeSnapshot",
    "PayrollLine",
    "PayrollLineCode",
    "PayrollOutcome",
    "PayrollResult",
]
