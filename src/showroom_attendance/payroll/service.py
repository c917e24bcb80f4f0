from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds
from ..common.validators import require_non_negative
from ..core.exceptions import ValidationError
from ..penalties.repository import PenaltyRepository
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator
from .model import EmployeeSalary, MonthlySalaryReport, SalaryCalculation

logger = logging.getLogger(__name__)


class SalaryService:
    """Reconciles active penalties against a base salary.

    Stateless: every call re-reads storage, so a removed penalty is reflected
    by simply calculating again.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        penalties: PenaltyRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
    ):
        self._attendance = attendance
        self._penalties = penalties
        self._calculator = calculator or StandardSalaryCalculator()

    def calculate(
        self,
        employee_id: int,
        base_salary: float,
        start_date: date,
        end_date: date,
        *,
        employee_name: Optional[str] = None,
    ) -> SalaryCalculation:
        base_salary = require_non_negative(base_salary, "Base salary")
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        records = self._attendance.list_for_employee(int(employee_id), start_date=start_date, end_date=end_date)
        penalties = self._penalties.list_for_employee(int(employee_id), start_date=start_date, end_date=end_date)

        result = self._calculator.calculate(
            employee_id=int(employee_id),
            base_salary=base_salary,
            start_date=start_date,
            end_date=end_date,
            records=records,
            penalties=penalties,
        )
        name = employee_name or next((r.employee_name for r in records if r.employee_name), None)
        if name:
            result = replace(result, employee_name=name)

        logger.debug(
            "Salary employee=%s %s..%s base=%.2f penalties=%.2f final=%.2f",
            employee_id,
            start_date,
            end_date,
            result.base_salary,
            result.total_penalties,
            result.final_salary,
        )
        return result

    def calculate_month(self, employee_id: int, base_salary: float, year: int, month: int) -> SalaryCalculation:
        start, end = month_bounds(year, month)
        return self.calculate(employee_id, base_salary, start, end)

    def build_monthly_report(
        self,
        year: int,
        month: int,
        employees: Iterable[EmployeeSalary],
        *,
        include_empty: bool = False,
    ) -> MonthlySalaryReport:
        start, end = month_bounds(year, month)

        rows: list[SalaryCalculation] = []
        for employee in employees:
            calc = self.calculate(
                employee.employee_id,
                employee.base_salary,
                start,
                end,
                employee_name=employee.employee_name or None,
            )
            has_activity = calc.attendance.working_days or calc.attendance.leave_days or calc.penalty_count
            if not has_activity and not include_empty:
                continue
            rows.append(calc)

        rows.sort(key=lambda c: (c.employee_name or "", c.employee_id))
        logger.info("Monthly salary report %04d-%02d: %d employees", int(year), int(month), len(rows))
        return MonthlySalaryReport(year=int(year), month=int(month), rows=rows)
