"""Payroll API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from erp_engine.api.dependencies import ActorId, Calculator, DbSession, Emitter
from erp_engine.api.schemas import (
    ErrorResponse,
    PayrollLineResponse,
    PayrollResultResponse,
    PayrollRunCreate,
    PayrollRunListResponse,
    PayrollRunResponse,
    ScheduleResponse,
    TaxBracketResponse,
)
from erp_engine.payroll import PayrollLine, PayrollService

router = APIRouter(tags=["payroll"])


def _line(line: PayrollLine) -> PayrollLineResponse:
    return PayrollLineResponse(code=line.code.value, name=line.name, amount=line.amount)


@router.post(
    "/payroll-runs",
    response_model=PayrollResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def run_payroll(
    db: DbSession,
    actor_id: ActorId,
    emitter: Emitter,
    calculator: Calculator,
    payload: PayrollRunCreate,
) -> PayrollResultResponse:
    """Compute and record payroll for one employee and period."""
    service = PayrollService(db, calculator)
    outcome = await service.calculate_payroll(
        payload.employee_id,
        payload.period,
        payload.bonuses,
        actor_id=actor_id,
    )
    await db.commit()
    emitter.emit_all(outcome.events)

    result = outcome.result
    return PayrollResultResponse(
        payroll_run_id=outcome.payroll_run_id,
        employee_id=result.employee_id,
        employee_number=result.employee_number,
        employee_name=result.employee_name,
        period=result.period,
        schedule_code=result.schedule_code,
        currency=result.currency,
        base_salary=result.base_salary,
        bonuses=result.bonuses,
        gross_salary=result.gross_salary,
        taxable_income=result.taxable_income,
        deductions=[_line(line) for line in result.deductions],
        contributions=[_line(line) for line in result.contributions],
        total_deductions=result.total_deductions,
        total_contributions=result.total_contributions,
        employer_cost=result.employer_cost,
        net_salary=result.net_salary,
    )


@router.get(
    "/employees/{employee_id}/payroll-runs",
    response_model=PayrollRunListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_payroll_runs(
    db: DbSession,
    calculator: Calculator,
    employee_id: Annotated[UUID, Path()],
) -> PayrollRunListResponse:
    """List an employee's payroll history."""
    runs = await PayrollService(db, calculator).list_runs(employee_id)
    return PayrollRunListResponse(
        items=[PayrollRunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.get("/payroll/schedule", response_model=ScheduleResponse)
async def get_schedule(calculator: Calculator) -> ScheduleResponse:
    """Describe the payroll schedule in force."""
    schedule = calculator.schedule
    return ScheduleResponse(
        code=schedule.code,
        name=schedule.name,
        currency=schedule.currency,
        fixed_levy=schedule.fixed_levy,
        brackets=[
            TaxBracketResponse(
                lower_bound=b.lower_bound,
                rate=b.rate,
                subtraction=b.subtraction,
            )
            for b in schedule.brackets
        ],
    )
