"""Statutory payroll schedules loaded from JSON configuration.

A schedule document has the structure:
{
    "code": "SN-2025",
    "currency": "XOF",
    "quantum": "0.01",
    "retirement": {"label": "...", "employee_rate": "0.056", "employee_cap": "500000",
                   "employer_rate": "0.092", "employer_cap": "500000"},
    "health": {...same shape as retirement...},
    "housing": {"label": "...", "employer_rate": "0.01"},
    "fixed_levy": {"label": "...", "amount": "1000"},
    "income_tax": {
        "label": "...",
        "brackets": [
            {"min": 0, "rate": 0, "subtract": 0},
            {"min": 20000, "rate": 0.03, "subtract": 300},
            ...
        ]
    }
}

Caps may be null (uncapped). Income tax uses the subtractive formula:
the bracket with the highest ``min`` not above taxable income applies, and
tax = taxable * rate - subtract, never below zero.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from erp_engine.config import get_settings

DEFAULT_SCHEDULE = "sn_2025.json"

ZERO = Decimal("0")
ONE = Decimal("1")


class ScheduleError(Exception):
    """Raised when a payroll schedule document is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid payroll schedule {source}: {reason}")


@dataclass(frozen=True)
class ContributionRule:
    """Rate/cap pair for a contribution paid on gross salary.

    Either side may be disabled with a zero rate. ``None`` caps mean uncapped.
    """

    label: str
    employee_rate: Decimal = ZERO
    employee_cap: Decimal | None = None
    employer_rate: Decimal = ZERO
    employer_cap: Decimal | None = None

    def employee_share(self, gross: Decimal) -> Decimal:
        return _capped(gross * self.employee_rate, self.employee_cap)

    def employer_share(self, gross: Decimal) -> Decimal:
        return _capped(gross * self.employer_rate, self.employer_cap)


@dataclass(frozen=True)
class TaxBracket:
    """Income tax bracket starting at ``lower_bound`` (inclusive)."""

    lower_bound: Decimal
    rate: Decimal
    subtraction: Decimal = ZERO


@dataclass(frozen=True)
class PayrollSchedule:
    """One jurisdiction's rates, caps and income tax table."""

    code: str
    currency: str
    quantum: Decimal
    retirement: ContributionRule
    health: ContributionRule
    housing: ContributionRule
    fixed_levy_label: str
    fixed_levy: Decimal
    income_tax_label: str
    brackets: tuple[TaxBracket, ...]
    name: str = ""

    def quantize(self, amount: Decimal) -> Decimal:
        return amount.quantize(self.quantum, rounding=ROUND_HALF_UP)

    def bracket_for(self, taxable_income: Decimal) -> TaxBracket:
        """Bracket with the highest lower bound not exceeding taxable income."""
        selected = self.brackets[0]
        for bracket in self.brackets:
            if bracket.lower_bound <= taxable_income:
                selected = bracket
            else:
                break
        return selected

    def income_tax(self, taxable_income: Decimal) -> Decimal:
        """Income tax on taxable income, clamped at zero."""
        if taxable_income <= 0:
            return ZERO
        bracket = self.bracket_for(taxable_income)
        tax = taxable_income * bracket.rate - bracket.subtraction
        return max(tax, ZERO)

    @classmethod
    def from_dict(cls, payload: dict[str, Any], source: str = "<dict>") -> PayrollSchedule:
        """Parse and validate a schedule document."""
        try:
            tax = payload["income_tax"]
            brackets = tuple(
                TaxBracket(
                    lower_bound=_decimal(b["min"]),
                    rate=_decimal(b["rate"]),
                    subtraction=_decimal(b.get("subtract", 0)),
                )
                for b in tax["brackets"]
            )
            levy = payload.get("fixed_levy") or {}
            schedule = cls(
                code=str(payload["code"]),
                name=str(payload.get("name", "")),
                currency=str(payload.get("currency", "")),
                quantum=_decimal(payload.get("quantum", "0.01")),
                retirement=_contribution(payload["retirement"], "retirement"),
                health=_contribution(payload["health"], "health"),
                housing=_contribution(payload["housing"], "housing"),
                fixed_levy_label=str(levy.get("label", "fixed levy")),
                fixed_levy=_decimal(levy.get("amount", 0)),
                income_tax_label=str(tax.get("label", "income tax")),
                brackets=brackets,
            )
        except KeyError as exc:
            raise ScheduleError(source, f"missing field {exc.args[0]!r}") from exc
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise ScheduleError(source, f"bad numeric value ({exc})") from exc

        schedule._validate(source)
        return schedule

    def _validate(self, source: str) -> None:
        if self.quantum <= 0:
            raise ScheduleError(source, "quantum must be positive")
        if self.fixed_levy < 0:
            raise ScheduleError(source, "fixed levy must not be negative")

        for rule in (self.retirement, self.health, self.housing):
            for rate in (rule.employee_rate, rule.employer_rate):
                if not ZERO <= rate <= ONE:
                    raise ScheduleError(source, f"{rule.label} rate {rate} outside [0, 1]")
            for cap in (rule.employee_cap, rule.employer_cap):
                if cap is not None and cap < 0:
                    raise ScheduleError(source, f"{rule.label} cap must not be negative")

        if not self.brackets:
            raise ScheduleError(source, "income tax table is empty")
        if self.brackets[0].lower_bound != 0:
            raise ScheduleError(source, "first income tax bracket must start at 0")
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if current.lower_bound <= previous.lower_bound:
                raise ScheduleError(source, "income tax brackets must be strictly ascending")
        for bracket in self.brackets:
            if not ZERO <= bracket.rate <= ONE:
                raise ScheduleError(source, f"bracket rate {bracket.rate} outside [0, 1]")
            if bracket.subtraction < 0:
                raise ScheduleError(source, "bracket subtraction must not be negative")


def load_schedule(path: str | Path | None = None) -> PayrollSchedule:
    """Load a schedule from a JSON file, or the packaged default."""
    if path is None:
        package_files = resources.files("erp_engine.payroll")
        text = package_files.joinpath("schedules").joinpath(DEFAULT_SCHEDULE).read_text(
            encoding="utf-8"
        )
        source = DEFAULT_SCHEDULE
    else:
        text = Path(path).read_text(encoding="utf-8")
        source = str(path)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScheduleError(source, f"not valid JSON ({exc.msg})") from exc
    return PayrollSchedule.from_dict(payload, source=source)


@lru_cache(maxsize=1)
def get_default_schedule() -> PayrollSchedule:
    """Get the configured schedule (PAYROLL_SCHEDULE_PATH or packaged default)."""
    return load_schedule(get_settings().payroll_schedule_path)


def _contribution(payload: dict[str, Any], default_label: str) -> ContributionRule:
    return ContributionRule(
        label=str(payload.get("label", default_label)),
        employee_rate=_decimal(payload.get("employee_rate", 0)),
        employee_cap=_optional_decimal(payload.get("employee_cap")),
        employer_rate=_decimal(payload.get("employer_rate", 0)),
        employer_cap=_optional_decimal(payload.get("employer_cap")),
    )


def _decimal(value: Any) -> Decimal:
    # str() first so JSON floats keep their written digits
    return Decimal(str(value))


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else _decimal(value)


def _capped(amount: Decimal, cap: Decimal | None) -> Decimal:
    return amount if cap is None else min(amount, cap)
