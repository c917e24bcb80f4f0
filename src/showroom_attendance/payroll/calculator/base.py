from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...penalties.model import Penalty
from ..model import SalaryCalculation


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def worked_minutes(self, record: AttendanceRecord) -> int:
        raise NotImplementedError

    @abstractmethod
    def calculate(
        self,
        *,
        employee_id: int,
        base_salary: float,
        start_date: date,
        end_date: date,
        records: Sequence[AttendanceRecord],
        penalties: Sequence[Penalty],
    ) -> SalaryCalculation:
        raise NotImplementedError
