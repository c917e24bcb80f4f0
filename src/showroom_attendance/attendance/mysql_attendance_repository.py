from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import AlreadyExistsError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, is_duplicate_key, read_hhmm, write_hhmm
from .model import AttendanceRecord, Break, GeoPoint, NewAttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, employee_name, work_date, status,
    check_in_time, check_out_time, check_in_photo, check_in_location, check_out_location,
    breaks, total_break_minutes, total_work_minutes, leave_type, leave_reason,
    created_at, updated_at, version
"""


def _location_to_json(point: Optional[GeoPoint]) -> Optional[str]:
    if point is None:
        return None
    return json.dumps({"latitude": point.latitude, "longitude": point.longitude, "accuracy": point.accuracy})


def _location_from_json(raw: Any) -> Optional[GeoPoint]:
    if not raw:
        return None
    data = json.loads(raw)
    return GeoPoint(latitude=data["latitude"], longitude=data["longitude"], accuracy=data.get("accuracy"))


def _breaks_to_json(breaks: Sequence[Break]) -> str:
    return json.dumps(
        [
            {
                "start_time": format_hhmm(b.start_time),
                "end_time": format_hhmm(b.end_time) if b.end_time else None,
                "duration_minutes": b.duration_minutes,
            }
            for b in breaks
        ]
    )


def _breaks_from_json(raw: Any) -> tuple[Break, ...]:
    if not raw:
        return ()
    return tuple(
        Break(
            start_time=parse_hhmm(b["start_time"]),
            end_time=parse_hhmm(b["end_time"]) if b.get("end_time") else None,
            duration_minutes=int(b.get("duration_minutes") or 0),
        )
        for b in json.loads(raw)
    )


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=read_hhmm(r.get("check_in_time")),
        check_out_time=read_hhmm(r.get("check_out_time")),
        check_in_photo=r.get("check_in_photo"),
        check_in_location=_location_from_json(r.get("check_in_location")),
        check_out_location=_location_from_json(r.get("check_out_location")),
        breaks=_breaks_from_json(r.get("breaks")),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        total_work_minutes=int(r.get("total_work_minutes") or 0),
        leave_type=LeaveType(r["leave_type"]) if r.get("leave_type") else None,
        leave_reason=r.get("leave_reason"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        version=int(r.get("version") or 0),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Attendance rows of one business unit."""

    def __init__(self, conn_factory: DatabaseConnection, business_unit: str):
        self._conn_factory = conn_factory
        self._business_unit = business_unit

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s AND business_unit=%s",
                (int(attendance_id), self._business_unit),
            )
            r = cur.fetchone()
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE business_unit=%s AND employee_id=%s AND work_date=%s
                """,
                (self._business_unit, int(employee_id), work_date),
            )
            r = cur.fetchone()
            return _row_to_record(r) if r else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["business_unit=%s", "employee_id=%s"]
        params: list[object] = [self._business_unit, int(employee_id)]
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date DESC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in cur.fetchall()]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE business_unit=%s AND work_date=%s
                ORDER BY employee_name ASC, employee_id ASC
                """,
                (self._business_unit, work_date),
            )
            return [_row_to_record(r) for r in cur.fetchall()]

    def create(self, record: NewAttendanceRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        business_unit, employee_id, employee_name, work_date, status,
                        check_in_time, check_in_photo, check_in_location, breaks,
                        leave_type, leave_reason, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        self._business_unit,
                        record.employee_id,
                        record.employee_name,
                        record.work_date,
                        record.status.value,
                        write_hhmm(record.check_in_time),
                        record.check_in_photo,
                        _location_to_json(record.check_in_location),
                        "[]",
                        record.leave_type.value if record.leave_type else None,
                        record.leave_reason,
                        record.created_at,
                        record.created_at,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if not is_duplicate_key(exc):
                raise
            raise AlreadyExistsError("Attendance already recorded for this day") from exc

    def save(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_time=%s, check_out_time=%s, check_in_photo=%s,
                    check_in_location=%s, check_out_location=%s, breaks=%s,
                    total_break_minutes=%s, total_work_minutes=%s,
                    leave_type=%s, leave_reason=%s, updated_at=%s, version=version+1
                WHERE attendance_id=%s AND business_unit=%s AND version=%s
                """,
                (
                    record.status.value,
                    write_hhmm(record.check_in_time),
                    write_hhmm(record.check_out_time),
                    record.check_in_photo,
                    _location_to_json(record.check_in_location),
                    _location_to_json(record.check_out_location),
                    _breaks_to_json(record.breaks),
                    int(record.total_break_minutes),
                    int(record.total_work_minutes),
                    record.leave_type.value if record.leave_type else None,
                    record.leave_reason,
                    record.updated_at,
                    int(record.attendance_id),
                    self._business_unit,
                    int(record.version),
                ),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE attendance_id=%s AND business_unit=%s",
                (int(attendance_id), self._business_unit),
            )
            return cur.rowcount > 0
