from datetime import date, time

import pytest

from showroom_attendance.attendance.model import AttendanceRecord
from showroom_attendance.core.enums import AttendanceStatus, LeaveType, PenaltyType
from showroom_attendance.penalties.engine import PenaltyRuleEngine
from showroom_attendance.penalties.model import PenaltySettings

WEDNESDAY = date(2024, 1, 10)
SATURDAY = date(2024, 1, 13)
SUNDAY = date(2024, 1, 14)


def worked_day(check_in: time, check_out: time, *, day: date = WEDNESDAY, break_minutes: int = 0) -> AttendanceRecord:
    minutes = (check_out.hour * 60 + check_out.minute) - (check_in.hour * 60 + check_in.minute) - break_minutes
    return AttendanceRecord(
        attendance_id=1,
        employee_id=7,
        employee_name="Asha",
        work_date=day,
        status=AttendanceStatus.CHECKED_OUT,
        check_in_time=check_in,
        check_out_time=check_out,
        total_break_minutes=break_minutes,
        total_work_minutes=max(0, minutes),
    )


def leave_day(day: date = WEDNESDAY) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=2,
        employee_id=7,
        employee_name="Asha",
        work_date=day,
        status=AttendanceStatus.ON_LEAVE,
        leave_type=LeaveType.SICK,
    )


@pytest.fixture
def engine():
    return PenaltyRuleEngine()


@pytest.fixture
def settings():
    return PenaltySettings()


def by_type(drafts):
    return {d.type: d.amount for d in drafts}


def test_full_on_time_day_has_no_penalty(engine, settings):
    assert engine.evaluate(worked_day(time(9, 0), time(18, 0), break_minutes=60), settings) == []


def test_incomplete_hours(engine, settings):
    # Worked 6h of 8h, left on time.
    record = worked_day(time(9, 0), time(18, 0), break_minutes=180)

    assert by_type(engine.evaluate(record, settings)) == {PenaltyType.INCOMPLETE_HOURS: 100.0}


def test_late_arrival_beyond_threshold(engine, settings):
    # 30 minutes late, still a full 8h day.
    record = worked_day(time(9, 30), time(18, 0), break_minutes=30)

    assert by_type(engine.evaluate(record, settings)) == {PenaltyType.LATE_ARRIVAL: 12.5}


def test_late_arrival_within_threshold_is_free(engine, settings):
    record = worked_day(time(9, 15), time(18, 0), break_minutes=45)

    assert engine.evaluate(record, settings) == []


def test_late_and_short_day_are_charged_independently(engine, settings):
    record = worked_day(time(9, 30), time(18, 0), break_minutes=150)

    assert by_type(engine.evaluate(record, settings)) == {
        PenaltyType.INCOMPLETE_HOURS: 100.0,
        PenaltyType.LATE_ARRIVAL: 12.5,
    }


def test_early_departure(engine, settings):
    record = worked_day(time(8, 0), time(17, 15), break_minutes=75)

    drafts = engine.evaluate(record, settings)

    assert by_type(drafts) == {PenaltyType.EARLY_DEPARTURE: 25.0}
    assert "45 min" in drafts[0].reason


@pytest.mark.parametrize("taken, expected", [(0, {}), (1, {}), (2, {PenaltyType.LEAVE: 500.0}), (5, {PenaltyType.LEAVE: 500.0})])
def test_leave_quota(engine, settings, taken, expected):
    assert by_type(engine.evaluate(leave_day(), settings, leaves_taken_this_month=taken)) == expected


def test_sunday_is_waived_when_weekend_penalties_disabled(engine, settings):
    record = worked_day(time(10, 0), time(14, 0), day=SUNDAY)

    assert engine.evaluate(record, settings) == []


def test_sunday_is_charged_when_enabled(engine):
    settings = PenaltySettings(weekend_penalty_enabled=True)
    record = worked_day(time(9, 0), time(18, 0), day=SUNDAY, break_minutes=180)

    drafts = engine.evaluate(record, settings)

    assert by_type(drafts) == {PenaltyType.INCOMPLETE_HOURS: 100.0}
    assert drafts[0].reason.endswith("(Sunday work)")


def test_saturday_is_a_normal_day(engine, settings):
    record = worked_day(time(9, 0), time(18, 0), day=SATURDAY, break_minutes=180)

    assert by_type(engine.evaluate(record, settings)) == {PenaltyType.INCOMPLETE_HOURS: 100.0}


def test_holiday_waiver(engine):
    record = worked_day(time(10, 0), time(14, 0))

    assert engine.evaluate(record, PenaltySettings(), is_holiday=True) == []
    assert engine.evaluate(record, PenaltySettings(holiday_penalty_enabled=True), is_holiday=True) != []


def test_open_days_produce_nothing(engine, settings):
    record = AttendanceRecord(
        attendance_id=3,
        employee_id=7,
        employee_name="Asha",
        work_date=WEDNESDAY,
        status=AttendanceStatus.CHECKED_IN,
        check_in_time=time(11, 0),
    )

    assert engine.evaluate(record, settings) == []


def test_zero_rate_emits_no_drafts(engine):
    settings = PenaltySettings(hourly_penalty_rate=0, leave_penalty_rate=0)

    assert engine.evaluate(worked_day(time(11, 0), time(13, 0)), settings) == []
    assert engine.evaluate(leave_day(), settings, leaves_taken_this_month=3) == []
