"""Data access for employees and payroll runs."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp_engine.models import Employee, PayrollRun


class HRRepository:
    """Queries used by the payroll service."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_employee(self, employee_id: UUID) -> Employee | None:
        return await self.session.get(Employee, employee_id)

    async def payroll_run_exists(self, employee_id: UUID, period: str) -> bool:
        result = await self.session.execute(
            select(func.count())
            .select_from(PayrollRun)
            .where(PayrollRun.employee_id == employee_id, PayrollRun.period == period)
        )
        return (result.scalar() or 0) > 0

    async def save_payroll_run(self, run: PayrollRun) -> None:
        self.session.add(run)
        await self.session.flush()

    async def list_payroll_runs(self, employee_id: UUID) -> list[PayrollRun]:
        """Payroll history of an employee, oldest period first."""
        result = await self.session.execute(
            select(PayrollRun)
            .where(PayrollRun.employee_id == employee_id)
            .order_by(PayrollRun.period)
        )
        return list(result.scalars().all())
