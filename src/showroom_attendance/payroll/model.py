from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..penalties.model import Penalty


@dataclass(frozen=True)
class PenaltyBreakdown:
    """Active penalty totals per salary bucket."""

    hourly: float = 0.0
    leave: float = 0.0
    manual: float = 0.0


@dataclass(frozen=True)
class AttendanceSummary:
    working_days: int = 0
    leave_days: int = 0
    total_work_hours: float = 0.0


@dataclass(frozen=True)
class SalaryCalculation:
    """Derived value: never stored, recomputed on every request."""

    employee_id: int
    start_date: date
    end_date: date
    base_salary: float
    total_penalties: float
    final_salary: float
    penalty_breakdown: PenaltyBreakdown
    penalty_count: int
    removed_count: int
    attendance: AttendanceSummary
    penalties: tuple[Penalty, ...] = ()
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class EmployeeSalary:
    employee_id: int
    base_salary: float
    employee_name: str = ""


@dataclass(frozen=True)
class MonthlySalaryReport:
    year: int
    month: int
    rows: list[SalaryCalculation] = field(default_factory=list)

    @property
    def total_base_salary(self) -> float:
        return round(sum(r.base_salary for r in self.rows), 2)

    @property
    def total_penalties(self) -> float:
        return round(sum(r.total_penalties for r in self.rows), 2)

    @property
    def total_final_salary(self) -> float:
        return round(sum(r.final_salary for r in self.rows), 2)
