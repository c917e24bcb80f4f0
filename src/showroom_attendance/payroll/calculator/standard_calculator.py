from __future__ import annotations

from datetime import date
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import minutes_between
from ...core.constants import CURRENCY_DECIMALS, MINUTES_PER_HOUR
from ...core.enums import HOURLY_PENALTY_TYPES, AttendanceStatus, PenaltyStatus, PenaltyType
from ...penalties.model import Penalty
from ..model import AttendanceSummary, PenaltyBreakdown, SalaryCalculation
from .base import SalaryCalculator


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: final = max(0, base - active penalties)."""

    def worked_minutes(self, record: AttendanceRecord) -> int:
        if record.status != AttendanceStatus.CHECKED_OUT or not record.check_in_time or not record.check_out_time:
            return 0
        minutes = minutes_between(record.check_in_time, record.check_out_time)
        minutes -= int(record.total_break_minutes or 0)
        return max(minutes, 0)

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
        active = tuple(p for p in penalties if p.is_active)

        hourly = sum(p.amount for p in active if p.type in HOURLY_PENALTY_TYPES)
        leave = sum(p.amount for p in active if p.type == PenaltyType.LEAVE)
        manual = sum(p.amount for p in active if p.type == PenaltyType.MANUAL)
        total = round(hourly + leave + manual, CURRENCY_DECIMALS)

        worked = [r for r in records if r.status == AttendanceStatus.CHECKED_OUT]
        total_minutes = sum(self.worked_minutes(r) for r in worked)

        return SalaryCalculation(
            employee_id=int(employee_id),
            start_date=start_date,
            end_date=end_date,
            base_salary=float(base_salary),
            total_penalties=total,
            final_salary=round(max(0.0, float(base_salary) - total), CURRENCY_DECIMALS),
            penalty_breakdown=PenaltyBreakdown(
                hourly=round(hourly, CURRENCY_DECIMALS),
                leave=round(leave, CURRENCY_DECIMALS),
                manual=round(manual, CURRENCY_DECIMALS),
            ),
            penalty_count=len(active),
            removed_count=sum(1 for p in penalties if p.status == PenaltyStatus.REMOVED),
            attendance=AttendanceSummary(
                working_days=sum(1 for r in records if not r.is_leave),
                leave_days=sum(1 for r in records if r.is_leave),
                total_work_hours=round(total_minutes / MINUTES_PER_HOUR, 2),
            ),
            penalties=active,
        )
