"""Gross-to-net payroll calculation."""

from __future__ import annotations

import logging
import re
from decimal import Decimal

from erp_engine.errors import InvalidEmployee, InvalidPayPeriod, MissingEmployeeIdentifier
from erp_engine.payroll.schedule import PayrollSchedule, get_default_schedule
from erp_engine.payroll.types import (
    EmployeeSnapshot,
    PayrollLine,
    PayrollLineCode,
    PayrollResult,
)

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_period(period: str) -> str:
    """Return the period if it is a YYYY-MM string, else raise InvalidPayPeriod."""
    if not isinstance(period, str) or not PERIOD_PATTERN.match(period):
        raise InvalidPayPeriod(str(period))
    return period


class PayrollCalculator:
    """Computes one employee's pay for one period under a fixed schedule.

    Calculation pipeline:
    1) gross = base salary + bonuses
    2) Retirement contribution, employee and employer shares (each capped)
    3) Health contribution, employee and employer shares (each capped)
    4) Housing fund, employer only, uncapped
    5) taxable = gross - employee retirement - employee health - fixed levy
    6) Income tax from the bracket table (never negative)
    7) net = gross - all employee-side deductions

    The fixed levy is owed in full whatever the salary, so a gross below the
    levy plus contributions yields a negative net. That result is returned
    as computed (never clamped) and logged as a warning.

    The calculator does no I/O: the same snapshot, period and bonuses always
    produce an equal PayrollResult.
    """

    def __init__(self, schedule: PayrollSchedule | None = None):
        self.schedule = schedule or get_default_schedule()

    def calculate(
        self,
        employee: EmployeeSnapshot,
        period: str,
        bonuses: Decimal = Decimal("0"),
    ) -> PayrollResult:
        """Calculate gross, deductions, contributions and net pay."""
        if employee.employee_id is None or employee.employee_id.int == 0:
            raise InvalidEmployee(employee.employee_id, "employee reference is missing")
        if not employee.employee_number or not employee.employee_number.strip():
            raise MissingEmployeeIdentifier(employee.employee_id)
        validate_period(period)
        if bonuses < 0:
            raise ValueError("Bonuses must not be negative")

        schedule = self.schedule
        q = schedule.quantize

        bonuses = q(bonuses)
        gross = q(employee.base_salary + bonuses)

        retirement_ee = q(schedule.retirement.employee_share(gross))
        retirement_er = q(schedule.retirement.employer_share(gross))
        health_ee = q(schedule.health.employee_share(gross))
        health_er = q(schedule.health.employer_share(gross))
        housing_er = q(schedule.housing.employer_share(gross))
        levy = q(schedule.fixed_levy)

        taxable = max(gross - retirement_ee - health_ee - levy, Decimal("0"))
        income_tax = q(schedule.income_tax(taxable))

        deductions = (
            PayrollLine(
                PayrollLineCode.RETIREMENT_EMPLOYEE,
                f"{schedule.retirement.label} employee",
                retirement_ee,
            ),
            PayrollLine(
                PayrollLineCode.HEALTH_EMPLOYEE,
                f"{schedule.health.label} employee",
                health_ee,
            ),
            PayrollLine(PayrollLineCode.FIXED_LEVY, schedule.fixed_levy_label, levy),
            PayrollLine(PayrollLineCode.INCOME_TAX, schedule.income_tax_label, income_tax),
        )
        contributions = (
            PayrollLine(
                PayrollLineCode.RETIREMENT_EMPLOYER,
                f"{schedule.retirement.label} employer",
                retirement_er,
            ),
            PayrollLine(
                PayrollLineCode.HEALTH_EMPLOYER,
                f"{schedule.health.label} employer",
                health_er,
            ),
            PayrollLine(PayrollLineCode.HOUSING_EMPLOYER, schedule.housing.label, housing_er),
        )

        net = gross - sum((line.amount for line in deductions), Decimal("0"))
        if net < 0:
            logger.warning(
                "Negative net pay %s for %s in %s: deductions exceed gross %s",
                net,
                employee.employee_number,
                period,
                gross,
            )

        logger.debug(
            "Payroll %s for %s: gross=%s taxable=%s net=%s",
            period,
            employee.employee_number,
            gross,
            taxable,
            net,
        )

        return PayrollResult(
            employee_id=employee.employee_id,
            employee_number=employee.employee_number,
            employee_name=employee.full_name,
            period=period,
            schedule_code=schedule.code,
            currency=schedule.currency,
            base_salary=employee.base_salary,
            bonuses=bonuses,
            gross_salary=gross,
            taxable_income=taxable,
            deductions=deductions,
            contributions=contributions,
            net_salary=net,
        )
