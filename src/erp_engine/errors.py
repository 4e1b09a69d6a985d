"""Business rule errors raised by the ledger and payroll cores.

Every error carries a stable ``code`` and the context a caller needs to render
a precise message (totals, account codes, dates and period bounds).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID


class BusinessRuleError(Exception):
    """Base class for caller-visible business rule failures."""

    code = "BUSINESS_RULE_VIOLATION"

    def context(self) -> dict[str, Any]:
        """Structured details for API responses and logs."""
        return {}


# =============================================================================
# Journal posting
# =============================================================================


class UnbalancedEntry(BusinessRuleError):
    """Raised when total debit differs from total credit."""

    code = "UNBALANCED_ENTRY"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal entry is not balanced: debit {total_debit}, credit {total_credit}"
        )

    def context(self) -> dict[str, Any]:
        return {"total_debit": str(self.total_debit), "total_credit": str(self.total_credit)}


class InvalidJournalLine(BusinessRuleError):
    """Raised when a line breaks double-entry discipline."""

    code = "INVALID_JOURNAL_LINE"

    def __init__(self, line_number: int | None, reason: str):
        self.line_number = line_number
        self.reason = reason
        if line_number is None:
            super().__init__(reason)
        else:
            super().__init__(f"Line {line_number}: {reason}")

    def context(self) -> dict[str, Any]:
        return {"line_number": self.line_number, "reason": self.reason}


class UnknownOrInactiveAccount(BusinessRuleError):
    """Raised when a line references a missing or inactive account."""

    code = "UNKNOWN_OR_INACTIVE_ACCOUNT"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account {account_code} does not exist or is not active")

    def context(self) -> dict[str, Any]:
        return {"account_code": self.account_code}


class NoOpenPeriod(BusinessRuleError):
    """Raised when no open financial period can be resolved."""

    code = "NO_OPEN_PERIOD"

    def __init__(self, as_of: date | None = None, period_id: UUID | None = None):
        self.as_of = as_of
        self.period_id = period_id
        if period_id is not None:
            msg = f"Financial period {period_id} does not exist or is not open"
        else:
            msg = f"No open financial period found for {as_of}"
        super().__init__(msg)

    def context(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat() if self.as_of else None,
            "period_id": str(self.period_id) if self.period_id else None,
        }


class DateOutsidePeriod(BusinessRuleError):
    """Raised when the entry date is outside the resolved period window."""

    code = "DATE_OUTSIDE_PERIOD"

    def __init__(self, entry_date: date, start_date: date, end_date: date):
        self.entry_date = entry_date
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Date {entry_date} is not within the open period ({start_date} - {end_date})"
        )

    def context(self) -> dict[str, Any]:
        return {
            "entry_date": self.entry_date.isoformat(),
            "period_start": self.start_date.isoformat(),
            "period_end": self.end_date.isoformat(),
        }


class ConcurrentPostConflict(BusinessRuleError):
    """Raised when entry-number allocation keeps colliding with concurrent posts."""

    code = "CONCURRENT_POST_CONFLICT"

    def __init__(self, journal_type: str, entry_date: date, attempts: int):
        self.journal_type = journal_type
        self.entry_date = entry_date
        self.attempts = attempts
        super().__init__(
            f"Could not allocate an entry number for {journal_type} on {entry_date} "
            f"after {attempts} attempts"
        )

    def context(self) -> dict[str, Any]:
        return {
            "journal_type": self.journal_type,
            "entry_date": self.entry_date.isoformat(),
            "attempts": self.attempts,
        }


# =============================================================================
# Payroll
# =============================================================================


class InvalidEmployee(BusinessRuleError):
    """Raised when the employee reference is empty, unknown or inactive."""

    code = "INVALID_EMPLOYEE"

    def __init__(self, employee_id: UUID | None, reason: str = "invalid employee"):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Employee {employee_id}: {reason}")

    def context(self) -> dict[str, Any]:
        return {
            "employee_id": str(self.employee_id) if self.employee_id else None,
            "reason": self.reason,
        }


class MissingEmployeeIdentifier(BusinessRuleError):
    """Raised when the employee has no matricule."""

    code = "MISSING_EMPLOYEE_IDENTIFIER"

    def __init__(self, employee_id: UUID | None):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} has no employee number")

    def context(self) -> dict[str, Any]:
        return {"employee_id": str(self.employee_id) if self.employee_id else None}


class InvalidPayPeriod(BusinessRuleError):
    """Raised when a pay period is not a valid YYYY-MM string."""

    code = "INVALID_PAY_PERIOD"

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Pay period '{period}' is not in YYYY-MM format")

    def context(self) -> dict[str, Any]:
        return {"period": self.period}


class PeriodAlreadyProcessed(BusinessRuleError):
    """Raised when payroll already ran for the employee and period."""

    code = "PERIOD_ALREADY_PROCESSED"

    def __init__(self, employee_id: UUID, period: str):
        self.employee_id = employee_id
        self.period = period
        super().__init__(f"Payroll for employee {employee_id} already processed for {period}")

    def context(self) -> dict[str, Any]:
        return {"employee_id": str(self.employee_id), "period": self.period}
