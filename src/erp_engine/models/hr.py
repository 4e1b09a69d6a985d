"""HR models: employees and their payroll history."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_engine.models.base import MONEY, Base, TimestampMixin


class Employee(Base, TimestampMixin):
    """Employee master record."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    payroll_runs: Mapped[list[PayrollRun]] = relationship(
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="PayrollRun.period",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PayrollRun(Base, TimestampMixin):
    """Computed payroll for one employee and one period (append-only)."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    period: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    schedule_code: Mapped[str] = mapped_column(String(20), nullable=False)

    base_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    bonuses: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    gross_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Employee-side deductions
    retirement_employee: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    health_employee: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    fixed_levy: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Employer-side contributions
    retirement_employer: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    health_employer: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    housing_employer: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    taxable_income: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_contributions: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "period", name="payroll_run_employee_period_key"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="payroll_runs")
