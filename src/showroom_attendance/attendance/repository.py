from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records of one employee, newest day first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: NewAttendanceRecord) -> int:
        """Insert and return the generated id.

        Raises AlreadyExistsError when (employee_id, work_date) is taken.
        """

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> bool:
        """Overwrite the stored record if it still has `record.version`.

        Bumps the stored version and returns False when the row is gone or
        was saved by someone else since it was read.
        """

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError
