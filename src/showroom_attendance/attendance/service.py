from __future__ import annotations

import dataclasses
import logging
from collections import Counter
from contextlib import contextmanager
from datetime import date, datetime, time
from typing import Any, Callable, Iterator, Optional, Sequence

from ..common.datetime_utils import minutes_between, month_bounds, now_local, truncate_to_minute
from ..common.locking import KeyedLock
from ..common.validators import require_date_range
from ..core.constants import SYSTEM_ACTOR
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import (
    AlreadyExistsError,
    BreakInProgressError,
    ConcurrentUpdateError,
    InvalidStateError,
    NoActiveBreakError,
    NotFoundError,
    ValidationError,
)
from ..penalties.lifecycle import PenaltyLifecycleManager
from ..penalties.service import PenaltyService
from .checklist import ChecklistNotifier, LoggingChecklistNotifier
from .model import AttendanceRecord, AttendanceStats, Break, GeoPoint, LeaveStats, NewAttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def compute_work_minutes(check_in: time, check_out: time, total_break_minutes: int) -> int:
    """(out - in) - breaks, never below 0."""
    return max(0, minutes_between(check_in, check_out) - int(total_break_minutes))


def _parse_leave_type(value: Any) -> LeaveType:
    if value is None or value == "":
        return LeaveType.PERSONAL
    try:
        return LeaveType(value)
    except ValueError:
        raise ValidationError(f"Unknown leave type {value!r}")


class AttendanceService:
    """Per-day attendance state machine.

    NOT_CHECKED_IN -> CHECKED_IN <-> ON_BREAK, CHECKED_IN -> CHECKED_OUT,
    and the separate ON_LEAVE state. "Not checked in" is the absence of a
    record, so only check_in and mark_leave create records.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        penalties: Optional[PenaltyService] = None,
        lifecycle: Optional[PenaltyLifecycleManager] = None,
        checklist: Optional[ChecklistNotifier] = None,
        clock: Callable[[], datetime] = now_local,
        locks: Optional[KeyedLock] = None,
    ):
        self._attendance = attendance
        self._penalties = penalties
        self._lifecycle = lifecycle
        self._checklist = checklist or LoggingChecklistNotifier()
        self._clock = clock
        self._locks = locks or KeyedLock()

    # ---- state transitions -------------------------------------------------

    def check_in(
        self,
        employee_id: int,
        *,
        employee_name: str = "",
        work_date: Optional[date] = None,
        at: Optional[time] = None,
        photo: Optional[str] = None,
        location: Optional[GeoPoint] = None,
    ) -> AttendanceRecord:
        now = self._clock()
        work_date = work_date or now.date()
        at = truncate_to_minute(at or now.time())

        with self._locks.hold(self._day_key(employee_id, work_date)):
            if self._attendance.get_for_employee_and_date(int(employee_id), work_date):
                raise AlreadyExistsError("Attendance already recorded for this day")

            attendance_id = self._attendance.create(
                NewAttendanceRecord(
                    employee_id=int(employee_id),
                    employee_name=(employee_name or "").strip(),
                    work_date=work_date,
                    status=AttendanceStatus.CHECKED_IN,
                    check_in_time=at,
                    check_in_photo=photo,
                    check_in_location=location,
                    created_at=now,
                )
            )
            record = self._require(attendance_id)

        logger.info("Check-in employee=%s date=%s at=%s", employee_id, work_date, at.strftime("%H:%M"))
        self._notify("on_check_in", record.employee_id, record.work_date)
        return record

    def check_out(
        self,
        attendance_id: int,
        *,
        at: Optional[time] = None,
        location: Optional[GeoPoint] = None,
    ) -> AttendanceRecord:
        at = truncate_to_minute(at or self._clock().time())

        with self._locked_record(attendance_id) as record:
            if record.status == AttendanceStatus.ON_BREAK:
                raise InvalidStateError("End the current break before checking out")
            if record.status != AttendanceStatus.CHECKED_IN:
                raise InvalidStateError(f"Cannot check out from status {record.status.value}")
            if record.check_in_time is None:
                raise InvalidStateError("Record has no check-in time")
            if at < record.check_in_time:
                raise ValidationError("Check-out time cannot be earlier than check-in time")

            updated = dataclasses.replace(
                record,
                check_out_time=at,
                check_out_location=location,
                total_work_minutes=compute_work_minutes(record.check_in_time, at, record.total_break_minutes),
                status=AttendanceStatus.CHECKED_OUT,
                updated_at=self._clock(),
            )
            updated = self._save(updated)

        logger.info(
            "Check-out employee=%s date=%s worked=%d min",
            updated.employee_id,
            updated.work_date,
            updated.total_work_minutes,
        )
        self._auto_apply_penalties(updated)
        return updated

    def start_break(self, attendance_id: int, *, at: Optional[time] = None) -> AttendanceRecord:
        at = truncate_to_minute(at or self._clock().time())

        with self._locked_record(attendance_id) as record:
            if record.status in {AttendanceStatus.ON_LEAVE, AttendanceStatus.CHECKED_OUT}:
                raise InvalidStateError(f"Cannot start a break while {record.status.value}")
            if record.open_break is not None:
                raise BreakInProgressError("Break already in progress")
            if record.check_in_time is not None and at < record.check_in_time:
                raise ValidationError("Break cannot start before check-in")

            updated = dataclasses.replace(
                record,
                breaks=record.breaks + (Break(start_time=at),),
                status=AttendanceStatus.ON_BREAK,
                updated_at=self._clock(),
            )
            updated = self._save(updated)

        logger.info("Break started employee=%s date=%s", updated.employee_id, updated.work_date)
        return updated

    def end_break(self, attendance_id: int, *, at: Optional[time] = None) -> AttendanceRecord:
        at = truncate_to_minute(at or self._clock().time())

        with self._locked_record(attendance_id) as record:
            index = next((i for i, b in enumerate(record.breaks) if b.is_open), None)
            if index is None:
                raise NoActiveBreakError("No active break found")

            active = record.breaks[index]
            duration = minutes_between(active.start_time, at)
            if duration < 0:
                raise ValidationError("Break cannot end before it started")

            breaks = list(record.breaks)
            breaks[index] = dataclasses.replace(active, end_time=at, duration_minutes=duration)
            updated = dataclasses.replace(
                record,
                breaks=tuple(breaks),
                total_break_minutes=sum(b.duration_minutes for b in breaks),
                status=AttendanceStatus.CHECKED_IN,
                updated_at=self._clock(),
            )
            updated = self._save(updated)

        logger.info("Break ended employee=%s date=%s duration=%d min", updated.employee_id, updated.work_date, duration)
        return updated

    def mark_leave(
        self,
        employee_id: int,
        *,
        work_date: date,
        employee_name: str = "",
        leave_type: LeaveType | str | None = LeaveType.PERSONAL,
        reason: str = "",
    ) -> AttendanceRecord:
        leave_type = _parse_leave_type(leave_type)

        with self._locks.hold(self._day_key(employee_id, work_date)):
            if self._attendance.get_for_employee_and_date(int(employee_id), work_date):
                raise AlreadyExistsError("Attendance already exists for this date. Cannot mark leave.")

            attendance_id = self._attendance.create(
                NewAttendanceRecord(
                    employee_id=int(employee_id),
                    employee_name=(employee_name or "").strip(),
                    work_date=work_date,
                    status=AttendanceStatus.ON_LEAVE,
                    leave_type=leave_type,
                    leave_reason=(reason or "").strip(),
                    created_at=self._clock(),
                )
            )
            record = self._require(attendance_id)

        logger.info("Leave marked employee=%s date=%s type=%s", employee_id, work_date, leave_type.value)
        self._auto_apply_penalties(record)
        self._notify("on_leave_marked", record.employee_id, record.work_date)
        return record

    def update_leave(
        self,
        attendance_id: int,
        *,
        leave_type: LeaveType | str | None = None,
        reason: Optional[str] = None,
    ) -> AttendanceRecord:
        with self._locked_record(attendance_id) as record:
            if not record.is_leave:
                raise InvalidStateError("Record is not a leave record")

            updated = dataclasses.replace(
                record,
                leave_type=_parse_leave_type(leave_type) if leave_type else record.leave_type,
                leave_reason=reason.strip() if reason else record.leave_reason,
                updated_at=self._clock(),
            )
            updated = self._save(updated)
        return updated

    def cancel_leave(self, attendance_id: int) -> AttendanceRecord:
        with self._locked_record(attendance_id) as record:
            if not record.is_leave:
                raise InvalidStateError("Record is not a leave record")

            self._notify("on_leave_cancelled", record.employee_id, record.work_date)
            self._attendance.delete(record.attendance_id)

            if self._lifecycle is not None:
                self._lifecycle.remove_leave_penalties(
                    record.employee_id,
                    record.work_date,
                    actor=SYSTEM_ACTOR,
                    reason="Leave cancelled",
                )

        logger.info("Leave cancelled employee=%s date=%s", record.employee_id, record.work_date)
        return record

    # ---- queries -----------------------------------------------------------

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        return self._require(attendance_id)

    def get_day_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(int(employee_id), work_date)

    def day_status(self, employee_id: int, work_date: date) -> AttendanceStatus:
        record = self.get_day_record(employee_id, work_date)
        return record.status if record else AttendanceStatus.NOT_CHECKED_IN

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        require_date_range(start_date, end_date)
        records = list(self._attendance.list_for_employee(int(employee_id), start_date=start_date, end_date=end_date))
        records.sort(key=lambda r: r.work_date, reverse=True)
        return records[:limit] if limit else records

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        return sorted(self._attendance.list_for_date(work_date), key=lambda r: (r.employee_name, r.employee_id))

    def attendance_stats(self, employee_id: int, *, today: Optional[date] = None) -> AttendanceStats:
        today = today or self._clock().date()
        records = self._attendance.list_for_employee(int(employee_id))
        month_start, month_end = month_bounds(today.year, today.month)

        monthly = [r for r in records if month_start <= r.work_date <= month_end]
        working_days = [r for r in monthly if not r.is_leave]
        leaves = [r for r in records if r.is_leave]
        total_minutes = sum(r.total_work_minutes for r in monthly)

        return AttendanceStats(
            today_present=sum(1 for r in records if r.work_date == today and not r.is_leave),
            monthly_present=len(working_days),
            total_work_hours=round(total_minutes / 60, 2),
            average_work_hours=round(total_minutes / len(working_days) / 60, 2) if working_days else 0.0,
            total_leaves=len(leaves),
            monthly_leaves=sum(1 for r in leaves if month_start <= r.work_date <= month_end),
        )

    def leave_stats(self, employee_id: int, *, year: Optional[int] = None, month: Optional[int] = None) -> LeaveStats:
        if month is not None and year is None:
            raise ValidationError("Month filter requires a year")

        leaves = [r for r in self._attendance.list_for_employee(int(employee_id)) if r.is_leave]
        if year is not None:
            leaves = [r for r in leaves if r.work_date.year == int(year)]
        if month is not None:
            leaves = [r for r in leaves if r.work_date.month == int(month)]

        by_type = Counter(r.leave_type.value if r.leave_type else "unspecified" for r in leaves)
        by_month = Counter(r.work_date.strftime("%Y-%m") for r in leaves)
        return LeaveStats(
            total_leaves=len(leaves),
            leaves_by_type=dict(by_type),
            monthly_breakdown=dict(sorted(by_month.items())),
        )

    # ---- helpers -----------------------------------------------------------

    @staticmethod
    def _day_key(employee_id: int, work_date: date) -> tuple[str, int, date]:
        return ("attendance", int(employee_id), work_date)

    def _require(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    @contextmanager
    def _locked_record(self, attendance_id: int) -> Iterator[AttendanceRecord]:
        """Hold the record's (employee, day) lock and yield a fresh read of it."""
        first = self._require(attendance_id)
        with self._locks.hold(self._day_key(first.employee_id, first.work_date)):
            yield self._require(attendance_id)

    def _save(self, record: AttendanceRecord) -> AttendanceRecord:
        if not self._attendance.save(record):
            raise ConcurrentUpdateError("Attendance record was changed by another request, retry")
        return dataclasses.replace(record, version=record.version + 1)

    def _auto_apply_penalties(self, record: AttendanceRecord) -> None:
        if self._penalties is None:
            return
        try:
            self._penalties.auto_apply(record)
        except Exception:
            # The attendance transition stands even if penalties could not be applied.
            logger.warning(
                "Failed to auto-apply penalties for attendance_id=%s",
                record.attendance_id,
                exc_info=True,
            )

    def _notify(self, event: str, employee_id: int, work_date: date) -> None:
        try:
            result = getattr(self._checklist, event)(employee_id, work_date)
            logger.debug("Checklist %s result: %r", event, result)
        except Exception:
            logger.warning("Checklist %s failed for employee=%s date=%s", event, employee_id, work_date, exc_info=True)

