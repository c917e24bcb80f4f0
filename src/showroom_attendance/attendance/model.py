from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..common.validators import require_coordinates
from ..core.enums import AttendanceStatus, LeaveType


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def __post_init__(self) -> None:
        require_coordinates(self.latitude, self.longitude)


@dataclass(frozen=True)
class Break:
    """One break inside a working day; end_time None means still in progress."""

    start_time: time
    end_time: Optional[time] = None
    duration_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    attendance_id: int
    employee_id: int
    employee_name: str
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    check_in_photo: Optional[str] = None
    check_in_location: Optional[GeoPoint] = None
    check_out_location: Optional[GeoPoint] = None
    breaks: tuple[Break, ...] = ()
    total_break_minutes: int = 0
    total_work_minutes: int = 0
    leave_type: Optional[LeaveType] = None
    leave_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Bumped by every save; a stale version is rejected.
    version: int = 0

    @property
    def open_break(self) -> Optional[Break]:
        return next((b for b in self.breaks if b.is_open), None)

    @property
    def is_leave(self) -> bool:
        return self.status == AttendanceStatus.ON_LEAVE


@dataclass(frozen=True)
class NewAttendanceRecord:
    """Values for a record that has not been stored yet (no id)."""

    employee_id: int
    employee_name: str
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[time] = None
    check_in_photo: Optional[str] = None
    check_in_location: Optional[GeoPoint] = None
    leave_type: Optional[LeaveType] = None
    leave_reason: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceStats:
    today_present: int = 0
    monthly_present: int = 0
    total_work_hours: float = 0.0
    average_work_hours: float = 0.0
    total_leaves: int = 0
    monthly_leaves: int = 0


@dataclass(frozen=True)
class LeaveStats:
    total_leaves: int = 0
    leaves_by_type: dict[str, int] = field(default_factory=dict)
    monthly_breakdown: dict[str, int] = field(default_factory=dict)
