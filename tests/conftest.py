from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Optional

import pytest

from showroom_attendance.attendance.model import AttendanceRecord, NewAttendanceRecord
from showroom_attendance.container import wire_services
from showroom_attendance.core.enums import PenaltyStatus
from showroom_attendance.core.exceptions import AlreadyExistsError
from showroom_attendance.penalties.model import NewPenalty, Penalty, PenaltySettings


class InMemoryAttendance:
    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (r for r in self._by_id.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def list_for_employee(self, employee_id: int, *, start_date=None, end_date=None):
        items = [
            r
            for r in self._by_id.values()
            if r.employee_id == employee_id
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items

    def list_for_date(self, work_date: date):
        return [r for r in self._by_id.values() if r.work_date == work_date]

    def create(self, record: NewAttendanceRecord) -> int:
        if self.get_for_employee_and_date(record.employee_id, record.work_date):
            raise AlreadyExistsError("duplicate day")
        self._id += 1
        self._by_id[self._id] = AttendanceRecord(
            attendance_id=self._id,
            employee_id=record.employee_id,
            employee_name=record.employee_name,
            work_date=record.work_date,
            status=record.status,
            check_in_time=record.check_in_time,
            check_in_photo=record.check_in_photo,
            check_in_location=record.check_in_location,
            leave_type=record.leave_type,
            leave_reason=record.leave_reason,
            created_at=record.created_at,
            updated_at=record.created_at,
        )
        return self._id

    def save(self, record: AttendanceRecord) -> bool:
        stored = self._by_id.get(record.attendance_id)
        if stored is None or stored.version != record.version:
            return False
        self._by_id[record.attendance_id] = dataclasses.replace(record, version=record.version + 1)
        return True

    def delete(self, attendance_id: int) -> bool:
        return self._by_id.pop(attendance_id, None) is not None


class InMemoryPenalties:
    def __init__(self):
        self._by_id: dict[int, Penalty] = {}
        self._id = 0

    def create(self, penalty: NewPenalty) -> Penalty:
        self._id += 1
        stored = Penalty(penalty_id=self._id, **dataclasses.asdict(penalty))
        self._by_id[self._id] = stored
        return stored

    def get_by_id(self, penalty_id: int) -> Optional[Penalty]:
        return self._by_id.get(penalty_id)

    def list_for_employee(self, employee_id: int, *, start_date=None, end_date=None, status=None):
        items = [
            p
            for p in self._by_id.values()
            if p.employee_id == employee_id
            and (start_date is None or p.date >= start_date)
            and (end_date is None or p.date <= end_date)
            and (status is None or p.status == PenaltyStatus(status))
        ]
        items.sort(key=lambda p: (p.date, p.penalty_id), reverse=True)
        return items

    def save(self, penalty: Penalty) -> bool:
        if penalty.penalty_id not in self._by_id:
            return False
        self._by_id[penalty.penalty_id] = penalty
        return True

    def all(self) -> list[Penalty]:
        return list(self._by_id.values())


class InMemorySettings:
    def __init__(self, settings: Optional[PenaltySettings] = None):
        self.current = settings
        self.saves = 0

    def get(self) -> Optional[PenaltySettings]:
        return self.current

    def save(self, settings: PenaltySettings) -> None:
        self.current = settings
        self.saves += 1


class RecordingChecklist:
    def __init__(self):
        self.events: list[tuple[str, int, date]] = []

    def on_check_in(self, employee_id: int, work_date: date):
        self.events.append(("check_in", employee_id, work_date))
        return {"assigned": 3}

    def on_leave_marked(self, employee_id: int, work_date: date):
        self.events.append(("leave_marked", employee_id, work_date))

    def on_leave_cancelled(self, employee_id: int, work_date: date):
        self.events.append(("leave_cancelled", employee_id, work_date))


class FixedHolidays:
    def __init__(self, *days: date):
        self.days = set(days)

    def is_holiday(self, day: date) -> bool:
        return day in self.days


# Wednesday
NOW = datetime(2024, 1, 10, 9, 0)


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def penalties_repo():
    return InMemoryPenalties()


@pytest.fixture
def settings_repo():
    return InMemorySettings()


@pytest.fixture
def checklist():
    return RecordingChecklist()


@pytest.fixture
def holidays():
    return FixedHolidays()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def container(attendance_repo, penalties_repo, settings_repo, checklist, holidays, clock):
    return wire_services(
        business_unit="electronics",
        attendance_repo=attendance_repo,
        penalties_repo=penalties_repo,
        settings_repo=settings_repo,
        checklist=checklist,
        holidays=holidays,
        clock=clock,
    )
