"""Tests for PayrollService persistence and duplicate protection."""

from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from erp_engine.errors import InvalidEmployee, InvalidPayPeriod, PeriodAlreadyProcessed
from erp_engine.events import EventCategory, PayrollRunRecorded
from erp_engine.models import Employee, PayrollRun
from erp_engine.payroll import (
    HRRepository,
    PayrollCalculator,
    PayrollService,
    load_schedule,
)
from tests.conftest import build_employees


class ForgetfulRepository(HRRepository):
    """Repository that never sees existing runs, as a concurrent request would."""

    async def payroll_run_exists(self, employee_id: UUID, period: str) -> bool:
        return False


class UnsavedEmployeeRepository(HRRepository):
    """Repository that hands back an employee row missing from the database."""

    def __init__(self, session, employee: Employee):
        super().__init__(session)
        self.employee = employee

    async def find_employee(self, employee_id: UUID) -> Employee | None:
        return self.employee


@pytest.fixture
def service(session) -> PayrollService:
    return PayrollService(session, PayrollCalculator(load_schedule()))


async def count_runs(session) -> int:
    return (await session.execute(select(func.count()).select_from(PayrollRun))).scalar()


class TestRecordPayroll:
    """Successful payroll runs."""

    async def test_records_run_with_all_line_items(self, session, service, employees):
        employee = employees["EMP001"]

        outcome = await service.calculate_payroll(
            employee.employee_id, "2025-01", actor_id="hr-manager"
        )

        run = await session.get(PayrollRun, outcome.payroll_run_id)
        assert run is not None
        assert run.employee_id == employee.employee_id
        assert run.period == "2025-01"
        assert run.schedule_code == "SN-2025"
        assert run.gross_salary == Decimal("500000")
        assert run.retirement_employee == Decimal("28000")
        assert run.health_employee == Decimal("5000")
        assert run.fixed_levy == Decimal("1000")
        assert run.income_tax == Decimal("94800")
        assert run.retirement_employer == Decimal("46000")
        assert run.health_employer == Decimal("15000")
        assert run.housing_employer == Decimal("5000")
        assert run.taxable_income == Decimal("466000")
        assert run.total_deductions == Decimal("128800")
        assert run.total_contributions == Decimal("66000")
        assert run.net_salary == Decimal("371200")
        assert run.created_by == "hr-manager"

    async def test_result_uses_employee_record(self, service, employees):
        employee = employees["EMP001"]

        outcome = await service.calculate_payroll(
            employee.employee_id, "2025-01", bonuses=Decimal("25000")
        )

        assert outcome.result.employee_number == "EMP001"
        assert outcome.result.employee_name == "Awa Diop"
        assert outcome.result.gross_salary == Decimal("525000")

    async def test_returns_recorded_event(self, service, employees):
        employee = employees["EMP001"]

        outcome = await service.calculate_payroll(
            employee.employee_id, "2025-01", actor_id="hr-manager"
        )

        assert len(outcome.events) == 1
        event = outcome.events[0]
        assert isinstance(event, PayrollRunRecorded)
        assert event.category == EventCategory.PAYROLL
        assert event.payroll_run_id == outcome.payroll_run_id
        assert event.employee_id == employee.employee_id
        assert event.net_salary == Decimal("371200")
        assert event.metadata.actor_id == "hr-manager"

    async def test_system_actor_when_caller_unknown(self, service, employees):
        outcome = await service.calculate_payroll(employees["EMP001"].employee_id, "2025-01")

        metadata = outcome.events[0].metadata
        assert metadata.actor_id is None
        assert metadata.actor_type == "system"

    async def test_history_ordered_by_period(self, service, employees):
        employee_id = employees["EMP001"].employee_id
        for period in ("2025-03", "2025-01", "2025-02"):
            await service.calculate_payroll(employee_id, period)

        runs = await service.list_runs(employee_id)

        assert [run.period for run in runs] == ["2025-01", "2025-02", "2025-03"]

    async def test_inactive_employee_history_is_readable(self, service, employees):
        assert await service.list_runs(employees["EMP002"].employee_id) == []


class TestRejectedPayroll:
    """Requests that must not produce a payroll run."""

    async def test_second_run_for_same_period_rejected(self, session, service, employees):
        employee_id = employees["EMP001"].employee_id
        await service.calculate_payroll(employee_id, "2025-01")

        with pytest.raises(PeriodAlreadyProcessed) as exc_info:
            await service.calculate_payroll(employee_id, "2025-01", bonuses=Decimal("1000"))

        assert exc_info.value.employee_id == employee_id
        assert exc_info.value.period == "2025-01"
        assert await count_runs(session) == 1

    async def test_insert_race_maps_to_already_processed(self, session, employees):
        employee_id = employees["EMP001"].employee_id
        calculator = PayrollCalculator(load_schedule())
        await PayrollService(session, calculator).calculate_payroll(employee_id, "2025-01")

        racing = PayrollService(session, calculator, ForgetfulRepository(session))
        with pytest.raises(PeriodAlreadyProcessed):
            await racing.calculate_payroll(employee_id, "2025-01")

        assert await count_runs(session) == 1

    async def test_unknown_employee(self, session, service, employees):
        missing = uuid4()

        with pytest.raises(InvalidEmployee) as exc_info:
            await service.calculate_payroll(missing, "2025-01")

        assert exc_info.value.employee_id == missing
        assert await count_runs(session) == 0

    async def test_inactive_employee(self, session, service, employees):
        with pytest.raises(InvalidEmployee, match="not active"):
            await service.calculate_payroll(employees["EMP002"].employee_id, "2025-01")

        assert await count_runs(session) == 0

    @pytest.mark.parametrize("employee_id", [None, UUID(int=0)], ids=["none", "nil-uuid"])
    async def test_missing_employee_reference(self, session, service, employee_id):
        with pytest.raises(InvalidEmployee, match="reference is missing"):
            await service.calculate_payroll(employee_id, "2025-01")

        assert await count_runs(session) == 0

    async def test_other_integrity_errors_propagate(self, session):
        ghost = build_employees()["EMP001"]
        ghost.is_active = True
        service = PayrollService(
            session,
            PayrollCalculator(load_schedule()),
            UnsavedEmployeeRepository(session, ghost),
        )

        # The run references an employee id with no row, so the foreign key fails
        with pytest.raises(IntegrityError):
            await service.calculate_payroll(ghost.employee_id, "2025-01")

        assert await count_runs(session) == 0

    async def test_malformed_period(self, service, employees):
        with pytest.raises(InvalidPayPeriod):
            await service.calculate_payroll(employees["EMP001"].employee_id, "2025/01")

    async def test_history_of_unknown_employee(self, service, employees):
        with pytest.raises(InvalidEmployee):
            await service.list_runs(uuid4())
