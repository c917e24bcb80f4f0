from datetime import date, datetime, time

from showroom_attendance.attendance.model import AttendanceRecord
from showroom_attendance.core.enums import AttendanceStatus, PenaltyStatus, PenaltyType
from showroom_attendance.payroll.calculator.standard_calculator import StandardSalaryCalculator
from showroom_attendance.penalties.model import Penalty


def _record(status=AttendanceStatus.CHECKED_OUT, check_out=time(17, 0)):
    return AttendanceRecord(
        attendance_id=1,
        employee_id=1,
        employee_name="A",
        work_date=date(2025, 1, 1),
        status=status,
        check_in_time=time(8, 0),
        check_out_time=check_out,
        total_break_minutes=60,
    )


def _penalty(penalty_id, penalty_type, amount, status=PenaltyStatus.ACTIVE):
    return Penalty(
        penalty_id=penalty_id,
        employee_id=1,
        employee_name="A",
        date=date(2025, 1, 1),
        type=penalty_type,
        amount=amount,
        reason="r",
        applied_by="system",
        applied_at=datetime(2025, 1, 1, 18, 0),
        status=status,
    )


def test_standard_calculator_subtracts_break():
    assert StandardSalaryCalculator().worked_minutes(_record()) == 8 * 60


def test_open_day_counts_zero_minutes():
    assert StandardSalaryCalculator().worked_minutes(_record(AttendanceStatus.CHECKED_IN, None)) == 0


def test_buckets_and_removed_penalties():
    penalties = [
        _penalty(1, PenaltyType.INCOMPLETE_HOURS, 100),
        _penalty(2, PenaltyType.LATE_ARRIVAL, 12.5),
        _penalty(3, PenaltyType.EARLY_DEPARTURE, 25),
        _penalty(4, PenaltyType.HOURLY, 10),
        _penalty(5, PenaltyType.LEAVE, 500),
        _penalty(6, PenaltyType.MANUAL, 200),
        _penalty(7, PenaltyType.MANUAL, 999, PenaltyStatus.REMOVED),
    ]

    result = StandardSalaryCalculator().calculate(
        employee_id=1,
        base_salary=30000,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        records=[_record()],
        penalties=penalties,
    )

    assert result.penalty_breakdown.hourly == 147.5
    assert result.penalty_breakdown.leave == 500
    assert result.penalty_breakdown.manual == 200
    assert result.total_penalties == 847.5
    assert result.final_salary == 29152.5
    assert result.penalty_count == 6
    assert result.removed_count == 1
    assert result.attendance.working_days == 1
    assert result.attendance.total_work_hours == 8.0


def test_final_salary_never_negative():
    result = StandardSalaryCalculator().calculate(
        employee_id=1,
        base_salary=30000,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        records=[],
        penalties=[_penalty(1, PenaltyType.MANUAL, 20000), _penalty(2, PenaltyType.LEAVE, 15000)],
    )

    assert result.total_penalties == 35000
    assert result.final_salary == 0
