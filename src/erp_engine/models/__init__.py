"""SQLAlchemy models."""

from erp_engine.models.base import Base, TimestampMixin
from erp_engine.models.finance import Account, FinancialPeriod, JournalEntry, JournalLine
from erp_engine.models.hr import Employee, PayrollRun

__all__ = [
    "Base",
    "TimestampMixin",
    "Account",
    "FinancialPeriod",
    "JournalEntry",
    "JournalLine",
    "Employee",
    "PayrollRun",
]
