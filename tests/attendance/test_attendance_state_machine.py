from __future__ import annotations

import threading
from datetime import date, time

import pytest

from showroom_attendance.attendance.model import GeoPoint
from showroom_attendance.attendance.service import AttendanceService, compute_work_minutes
from showroom_attendance.core.enums import AttendanceStatus, LeaveType, PenaltyStatus, PenaltyType
from showroom_attendance.core.exceptions import (
    AlreadyExistsError,
    BreakInProgressError,
    ConcurrentUpdateError,
    InvalidStateError,
    NoActiveBreakError,
    NotFoundError,
    ValidationError,
)

DAY = date(2024, 1, 10)


def test_compute_work_minutes_never_negative():
    assert compute_work_minutes(time(9, 0), time(18, 0), 60) == 480
    assert compute_work_minutes(time(9, 0), time(9, 30), 60) == 0


def test_check_in_creates_record_and_notifies_checklist(container, checklist):
    service = container.attendance_service

    record = service.check_in(
        7,
        employee_name="Asha",
        at=time(9, 2, 45),
        location=GeoPoint(latitude=12.97, longitude=77.59, accuracy=10),
    )

    assert record.status == AttendanceStatus.CHECKED_IN
    assert record.work_date == DAY
    assert record.check_in_time == time(9, 2)
    assert record.breaks == ()
    assert record.total_work_minutes == 0
    assert checklist.events == [("check_in", 7, DAY)]


def test_second_check_in_same_day_is_rejected(container):
    service = container.attendance_service
    service.check_in(7, employee_name="Asha")

    with pytest.raises(AlreadyExistsError):
        service.check_in(7, employee_name="Asha")


def test_full_day_with_break(container, penalties_repo):
    service = container.attendance_service
    record = service.check_in(7, employee_name="Asha", at=time(9, 0))

    record = service.start_break(record.attendance_id, at=time(13, 0))
    assert record.status == AttendanceStatus.ON_BREAK
    assert record.open_break is not None

    record = service.end_break(record.attendance_id, at=time(14, 0))
    assert record.status == AttendanceStatus.CHECKED_IN
    assert record.total_break_minutes == 60

    record = service.check_out(record.attendance_id, at=time(18, 0))
    assert record.status == AttendanceStatus.CHECKED_OUT
    assert record.total_work_minutes == 480
    # Full day, on time: no penalties.
    assert penalties_repo.all() == []


def test_break_total_is_sum_of_all_breaks(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))

    service.start_break(record.attendance_id, at=time(11, 0))
    service.end_break(record.attendance_id, at=time(11, 15))
    service.start_break(record.attendance_id, at=time(13, 0))
    record = service.end_break(record.attendance_id, at=time(13, 45))

    assert len(record.breaks) == 2
    assert record.total_break_minutes == 60


def test_cannot_start_two_breaks(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))
    service.start_break(record.attendance_id, at=time(12, 0))

    with pytest.raises(BreakInProgressError):
        service.start_break(record.attendance_id, at=time(12, 5))


def test_end_break_without_open_break(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))

    with pytest.raises(NoActiveBreakError):
        service.end_break(record.attendance_id, at=time(12, 0))


def test_end_break_before_start_is_rejected(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))
    service.start_break(record.attendance_id, at=time(23, 50))

    with pytest.raises(ValidationError):
        service.end_break(record.attendance_id, at=time(0, 10))


def test_check_out_while_on_break_is_rejected(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))
    service.start_break(record.attendance_id, at=time(12, 0))

    with pytest.raises(InvalidStateError):
        service.check_out(record.attendance_id, at=time(18, 0))


def test_check_out_twice_is_rejected(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))
    service.check_out(record.attendance_id, at=time(18, 0))

    with pytest.raises(InvalidStateError):
        service.check_out(record.attendance_id, at=time(18, 5))
    with pytest.raises(InvalidStateError):
        service.start_break(record.attendance_id, at=time(18, 5))


def test_check_out_before_check_in_is_rejected(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(22, 0))

    with pytest.raises(ValidationError):
        service.check_out(record.attendance_id, at=time(2, 0))


def test_unknown_record_raises_not_found(container):
    service = container.attendance_service

    with pytest.raises(NotFoundError):
        service.check_out(999, at=time(18, 0))
    with pytest.raises(NotFoundError):
        service.start_break(999)
    with pytest.raises(NotFoundError):
        service.cancel_leave(999)


def test_check_out_applies_penalties(container, penalties_repo):
    service = container.attendance_service
    record = service.check_in(7, employee_name="Asha", at=time(9, 30))

    service.check_out(record.attendance_id, at=time(18, 0))

    penalties = penalties_repo.all()
    assert [p.type for p in penalties] == [PenaltyType.LATE_ARRIVAL]
    assert penalties[0].amount == 12.5
    assert all(p.attendance_id == record.attendance_id for p in penalties)
    assert all(p.applied_by == "system" for p in penalties)


def test_mark_leave_is_exclusive_with_attendance(container):
    service = container.attendance_service
    service.check_in(7, at=time(9, 0))

    with pytest.raises(AlreadyExistsError):
        service.mark_leave(7, work_date=DAY, leave_type=LeaveType.SICK)


def test_check_in_on_leave_day_is_rejected(container):
    service = container.attendance_service
    service.mark_leave(7, work_date=DAY, leave_type="sick", reason="flu")

    with pytest.raises(AlreadyExistsError):
        service.check_in(7, work_date=DAY)


def test_leave_record_has_no_time_data(container, checklist):
    record = container.attendance_service.mark_leave(7, employee_name="Asha", work_date=DAY, reason="family event")

    assert record.status == AttendanceStatus.ON_LEAVE
    assert record.leave_type == LeaveType.PERSONAL
    assert record.check_in_time is None
    assert record.check_out_time is None
    assert ("leave_marked", 7, DAY) in checklist.events


def test_unknown_leave_type_is_rejected(container):
    with pytest.raises(ValidationError):
        container.attendance_service.mark_leave(7, work_date=DAY, leave_type="sabbatical")


def test_break_on_leave_day_is_rejected(container):
    service = container.attendance_service
    record = service.mark_leave(7, work_date=DAY)

    with pytest.raises(InvalidStateError):
        service.start_break(record.attendance_id)
    with pytest.raises(InvalidStateError):
        service.check_out(record.attendance_id)


def test_cancel_leave_removes_leave_penalty_and_allows_check_in(container, penalties_repo, checklist):
    service = container.attendance_service
    service.mark_leave(7, work_date=date(2024, 1, 2))
    service.mark_leave(7, work_date=date(2024, 1, 3))
    third = service.mark_leave(7, work_date=DAY)

    leave_penalty = next(p for p in penalties_repo.all() if p.date == DAY)
    assert leave_penalty.type == PenaltyType.LEAVE

    service.cancel_leave(third.attendance_id)

    removed = penalties_repo.get_by_id(leave_penalty.penalty_id)
    assert removed.status == PenaltyStatus.REMOVED
    assert removed.removed_by == "system"
    assert removed.removal_reason == "Leave cancelled"
    assert ("leave_cancelled", 7, DAY) in checklist.events
    assert service.get_day_record(7, DAY) is None

    assert service.check_in(7, work_date=DAY, at=time(9, 0)).status == AttendanceStatus.CHECKED_IN


def test_cancel_leave_on_working_day_is_rejected(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))

    with pytest.raises(InvalidStateError):
        service.cancel_leave(record.attendance_id)


def test_update_leave_changes_metadata_only(container):
    service = container.attendance_service
    record = service.mark_leave(7, work_date=DAY, leave_type="personal", reason="errand")

    updated = service.update_leave(record.attendance_id, leave_type="medical", reason="dentist")

    assert updated.leave_type == LeaveType.MEDICAL
    assert updated.leave_reason == "dentist"
    assert updated.work_date == record.work_date


def test_side_effect_failures_do_not_undo_the_transition(attendance_repo):
    class BrokenChecklist:
        def on_check_in(self, employee_id, work_date):
            raise RuntimeError("checklist down")

    class BrokenPenalties:
        def auto_apply(self, record):
            raise RuntimeError("db down")

    service = AttendanceService(attendance_repo, penalties=BrokenPenalties(), checklist=BrokenChecklist())

    record = service.check_in(7, work_date=DAY, at=time(9, 0))
    record = service.check_out(record.attendance_id, at=time(12, 0))

    assert attendance_repo.get_by_id(record.attendance_id).status == AttendanceStatus.CHECKED_OUT


def test_concurrent_end_break_succeeds_once(container):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))
    service.start_break(record.attendance_id, at=time(12, 0))

    barrier = threading.Barrier(2)
    outcomes: list[str] = []

    def worker():
        barrier.wait()
        try:
            service.end_break(record.attendance_id, at=time(12, 30))
            outcomes.append("ok")
        except NoActiveBreakError:
            outcomes.append("rejected")

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["ok", "rejected"]
    assert service.get_record(record.attendance_id).total_break_minutes == 30


def test_concurrent_check_in_creates_one_record(container, attendance_repo):
    service = container.attendance_service
    barrier = threading.Barrier(4)
    outcomes: list[str] = []

    def worker():
        barrier.wait()
        try:
            service.check_in(7, at=time(9, 0))
            outcomes.append("ok")
        except AlreadyExistsError:
            outcomes.append("duplicate")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert len(attendance_repo.list_for_employee(7)) == 1


def test_save_with_stale_version_is_refused(container, attendance_repo):
    record = container.attendance_service.check_in(7, at=time(9, 0))

    assert attendance_repo.save(record) is True
    assert attendance_repo.save(record) is False
    assert attendance_repo.get_by_id(record.attendance_id).version == record.version + 1


def test_returned_record_matches_stored_version(container, attendance_repo):
    service = container.attendance_service
    record = service.check_in(7, at=time(9, 0))

    record = service.start_break(record.attendance_id, at=time(12, 0))
    record = service.end_break(record.attendance_id, at=time(12, 30))

    assert record == attendance_repo.get_by_id(record.attendance_id)


class InterleavedAttendance:
    """Runs `between` right after the locked re-read, before the caller saves."""

    def __init__(self, inner, between):
        self._inner = inner
        self._between = between
        self._reads = 0

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def get_by_id(self, attendance_id):
        record = self._inner.get_by_id(attendance_id)
        self._reads += 1
        if self._reads == 2:
            self._between()
        return record


def test_end_break_from_two_workers_does_not_lose_an_update(attendance_repo, clock):
    # Separate services and locks stand in for two worker processes.
    other_worker = AttendanceService(attendance_repo, clock=clock)
    record = other_worker.check_in(7, work_date=DAY, at=time(9, 0))
    other_worker.start_break(record.attendance_id, at=time(12, 0))

    worker = AttendanceService(
        InterleavedAttendance(
            attendance_repo,
            lambda: other_worker.end_break(record.attendance_id, at=time(12, 45)),
        ),
        clock=clock,
    )

    with pytest.raises(ConcurrentUpdateError):
        worker.end_break(record.attendance_id, at=time(12, 30))

    stored = attendance_repo.get_by_id(record.attendance_id)
    assert stored.status == AttendanceStatus.CHECKED_IN
    assert stored.total_break_minutes == 45
    assert [b.end_time for b in stored.breaks] == [time(12, 45)]
