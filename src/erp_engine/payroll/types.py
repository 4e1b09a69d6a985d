"""Type definitions for the payroll calculation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID

from erp_engine.events.types import DomainEvent


class PayrollLineCode(str, Enum):
    """Statutory line items; values match the payroll_run columns."""

    # Employee side (withheld from gross)
    RETIREMENT_EMPLOYEE = "retirement_employee"
    HEALTH_EMPLOYEE = "health_employee"
    FIXED_LEVY = "fixed_levy"
    INCOME_TAX = "income_tax"

    # Employer side (cost on top of gross)
    RETIREMENT_EMPLOYER = "retirement_employer"
    HEALTH_EMPLOYER = "health_employer"
    HOUSING_EMPLOYER = "housing_employer"


@dataclass(frozen=True)
class EmployeeSnapshot:
    """The employee fields the calculation depends on."""

    employee_id: UUID | None
    employee_number: str | None
    base_salary: Decimal
    full_name: str = ""


@dataclass(frozen=True)
class PayrollLine:
    """A named deduction or contribution."""

    code: PayrollLineCode
    name: str
    amount: Decimal


@dataclass(frozen=True)
class PayrollResult:
    """Gross-to-net result for one employee and one period."""

    employee_id: UUID
    employee_number: str
    employee_name: str
    period: str
    schedule_code: str
    currency: str
    base_salary: Decimal
    bonuses: Decimal
    gross_salary: Decimal
    taxable_income: Decimal
    deductions: tuple[PayrollLine, ...]
    contributions: tuple[PayrollLine, ...]
    net_salary: Decimal

    @property
    def total_deductions(self) -> Decimal:
        return sum((line.amount for line in self.deductions), Decimal("0"))

    @property
    def total_contributions(self) -> Decimal:
        return sum((line.amount for line in self.contributions), Decimal("0"))

    @property
    def employer_cost(self) -> Decimal:
        """Gross salary plus all employer contributions."""
        return self.gross_salary + self.total_contributions

    @property
    def income_tax(self) -> Decimal:
        return self.amount(PayrollLineCode.INCOME_TAX)

    def amount(self, code: PayrollLineCode) -> Decimal:
        """Amount of a line item, zero if the schedule did not produce it."""
        for line in self.deductions + self.contributions:
            if line.code == code:
                return line.amount
        return Decimal("0")


@dataclass(frozen=True)
class PayrollOutcome:
    """Result of running payroll through the service (persisted)."""

    payroll_run_id: UUID
    result: PayrollResult
    events: tuple[DomainEvent, ...] = field(default_factory=tuple)
