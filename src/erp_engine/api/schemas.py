"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from erp_engine.ledger import JournalType


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for business rule failures."""

    detail: str
    code: str
    context: dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Journal schemas
# ============================================================================


class JournalLineCreate(BaseModel):
    """One requested journal line."""

    account_code: str = Field(min_length=1, max_length=20)
    debit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    auxiliary: str | None = None
    cost_center: str | None = None
    description: str | None = None


class JournalEntryCreate(BaseModel):
    """Schema for posting a journal entry."""

    entry_date: date
    reference: str = ""
    memo: str = ""
    journal_type: JournalType = JournalType.GENERAL
    period_id: UUID | None = None
    lines: list[JournalLineCreate]


class PostJournalResponse(BaseModel):
    """Schema for a successful post."""

    entry_id: UUID
    entry_number: str
    period_id: UUID
    total_debit: Decimal
    total_credit: Decimal


class JournalLineResponse(BaseModel):
    """Schema for a stored journal line."""

    model_config = ConfigDict(from_attributes=True)

    line_number: int
    account_code: str
    debit: Decimal
    credit: Decimal
    auxiliary: str | None = None
    cost_center: str | None = None
    description: str | None = None


class JournalEntryResponse(BaseModel):
    """Schema for a stored journal entry."""

    model_config = ConfigDict(from_attributes=True)

    entry_id: UUID
    entry_number: str
    entry_date: date
    reference: str
    memo: str
    journal_type: str
    period_id: UUID
    total_debit: Decimal
    total_credit: Decimal
    is_posted: bool
    posted_at: datetime | None = None
    posted_by: str | None = None
    lines: list[JournalLineResponse]


# ============================================================================
# Payroll schemas
# ============================================================================


class PayrollRunCreate(BaseModel):
    """Schema for running payroll for one employee."""

    employee_id: UUID
    period: str = Field(examples=["2025-01"])
    bonuses: Decimal = Field(default=Decimal("0"), ge=0, max_digits=18, decimal_places=2)


class PayrollLineResponse(BaseModel):
    """A named deduction or contribution."""

    code: str
    name: str
    amount: Decimal


class PayrollResultResponse(BaseModel):
    """Schema for a computed payroll."""

    payroll_run_id: UUID
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
    deductions: list[PayrollLineResponse]
    contributions: list[PayrollLineResponse]
    total_deductions: Decimal
    total_contributions: Decimal
    employer_cost: Decimal
    net_salary: Decimal


class PayrollRunResponse(BaseModel):
    """Schema for a stored payroll run."""

    model_config = ConfigDict(from_attributes=True)

    payroll_run_id: UUID
    employee_id: UUID
    period: str
    schedule_code: str
    base_salary: Decimal
    bonuses: Decimal
    gross_salary: Decimal
    retirement_employee: Decimal
    health_employee: Decimal
    fixed_levy: Decimal
    income_tax: Decimal
    retirement_employer: Decimal
    health_employer: Decimal
    housing_employer: Decimal
    taxable_income: Decimal
    total_deductions: Decimal
    total_contributions: Decimal
    net_salary: Decimal
    created_by: str | None = None
    created_at: datetime


class PayrollRunListResponse(BaseModel):
    """Schema for listing an employee's payroll runs."""

    items: list[PayrollRunResponse]
    total: int


class TaxBracketResponse(BaseModel):
    lower_bound: Decimal
    rate: Decimal
    subtraction: Decimal


class ScheduleResponse(BaseModel):
    """The payroll schedule in force."""

    code: str
    name: str
    currency: str
    fixed_levy: Decimal
    brackets: list[TaxBracketResponse]
