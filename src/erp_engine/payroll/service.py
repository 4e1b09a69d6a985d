"""Payroll service: runs the calculator and records the payroll run."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp_engine.errors import InvalidEmployee, PeriodAlreadyProcessed
from erp_engine.events.types import EventMetadata, PayrollRunRecorded
from erp_engine.models import Employee, PayrollRun
from erp_engine.payroll.calculator import PayrollCalculator, validate_period
from erp_engine.payroll.repository import HRRepository
from erp_engine.payroll.types import (
    EmployeeSnapshot,
    PayrollLineCode,
    PayrollOutcome,
    PayrollResult,
)

logger = logging.getLogger(__name__)

# Constraint violations that mean the (employee, period) run already exists
_DUPLICATE_RUN_MARKERS = (
    "payroll_run_employee_period_key",
    "payroll_run.employee_id, payroll_run.period",
)


def snapshot_employee(employee: Employee) -> EmployeeSnapshot:
    """Freeze the fields of an employee record the calculator reads."""
    return EmployeeSnapshot(
        employee_id=employee.employee_id,
        employee_number=employee.employee_number,
        base_salary=employee.base_salary,
        full_name=employee.full_name,
    )


class PayrollService:
    """Runs payroll for an employee and appends the result to history.

    One payroll run per (employee, period): a second request for the same
    pair is rejected with PeriodAlreadyProcessed, never recomputed.
    """

    def __init__(
        self,
        session: AsyncSession,
        calculator: PayrollCalculator | None = None,
        repository: HRRepository | None = None,
    ):
        self.session = session
        self.calculator = calculator or PayrollCalculator()
        self.repository = repository or HRRepository(session)

    async def calculate_payroll(
        self,
        employee_id: UUID | None,
        period: str,
        bonuses: Decimal = Decimal("0"),
        actor_id: str | None = None,
    ) -> PayrollOutcome:
        """Compute and store payroll for one employee and period."""
        if employee_id is None or employee_id.int == 0:
            raise InvalidEmployee(employee_id, "employee reference is missing")
        validate_period(period)

        employee = await self.repository.find_employee(employee_id)
        if employee is None:
            raise InvalidEmployee(employee_id, "employee not found")
        if not employee.is_active:
            raise InvalidEmployee(employee_id, "employee is not active")

        if await self.repository.payroll_run_exists(employee_id, period):
            raise PeriodAlreadyProcessed(employee_id, period)

        result = self.calculator.calculate(snapshot_employee(employee), period, bonuses)
        run = _build_run(result, actor_id)

        try:
            async with self.session.begin_nested():
                await self.repository.save_payroll_run(run)
        except IntegrityError as exc:
            if not _is_duplicate_run(exc):
                raise
            # Lost a race with another request for the same employee and period
            raise PeriodAlreadyProcessed(employee_id, period) from exc

        logger.info(
            "Payroll %s recorded for employee %s (net %s)",
            period,
            result.employee_number,
            result.net_salary,
        )

        event = PayrollRunRecorded(
            metadata=EventMetadata.create(actor_id=actor_id),
            payroll_run_id=run.payroll_run_id,
            employee_id=employee_id,
            period=period,
            schedule_code=result.schedule_code,
            gross_salary=result.gross_salary,
            net_salary=result.net_salary,
            total_contributions=result.total_contributions,
        )
        return PayrollOutcome(payroll_run_id=run.payroll_run_id, result=result, events=(event,))

    async def list_runs(self, employee_id: UUID) -> list[PayrollRun]:
        """Payroll history for an employee."""
        employee = await self.repository.find_employee(employee_id)
        if employee is None:
            raise InvalidEmployee(employee_id, "employee not found")
        return await self.repository.list_payroll_runs(employee_id)


def _build_run(result: PayrollResult, actor_id: str | None) -> PayrollRun:
    return PayrollRun(
        payroll_run_id=uuid4(),
        employee_id=result.employee_id,
        period=result.period,
        schedule_code=result.schedule_code,
        base_salary=result.base_salary,
        bonuses=result.bonuses,
        gross_salary=result.gross_salary,
        taxable_income=result.taxable_income,
        total_deductions=result.total_deductions,
        total_contributions=result.total_contributions,
        net_salary=result.net_salary,
        created_by=actor_id,
        **{code.value: result.amount(code) for code in PayrollLineCode},
    )


def _is_duplicate_run(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _DUPLICATE_RUN_MARKERS)
