from __future__ import annotations

from typing import Any, Optional

from flask import Flask, request

from ..common.datetime_utils import parse_hhmm, parse_iso_date, parse_optional_date
from ..common.http import json_body, ok, optional_int, require_int
from ..core.exceptions import ValidationError
from ..container import Container
from .model import GeoPoint


def _parse_location(raw: Any) -> Optional[GeoPoint]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("Location must be an object with latitude and longitude")
    try:
        return GeoPoint(
            latitude=float(raw["latitude"]),
            longitude=float(raw["longitude"]),
            accuracy=float(raw["accuracy"]) if raw.get("accuracy") is not None else None,
        )
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Location must be an object with latitude and longitude")


def _optional_time(raw: Any):
    return parse_hhmm(str(raw)) if raw else None


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="api_attendance_checkin")
    def checkin():
        data = json_body()
        record = service.check_in(
            require_int(data.get("employee_id"), "employee_id"),
            employee_name=str(data.get("employee_name") or ""),
            work_date=parse_optional_date(data.get("date")),
            at=_optional_time(data.get("time")),
            photo=data.get("photo"),
            location=_parse_location(data.get("location")),
        )
        return ok(record, 201, message="Checked in successfully")

    @app.route("/api/attendance/<int:attendance_id>/checkout", methods=["POST"], endpoint="api_attendance_checkout")
    def checkout(attendance_id: int):
        data = json_body()
        record = service.check_out(
            attendance_id,
            at=_optional_time(data.get("time")),
            location=_parse_location(data.get("location")),
        )
        return ok(record, message="Checked out successfully")

    @app.route(
        "/api/attendance/<int:attendance_id>/breaks/start",
        methods=["POST"],
        endpoint="api_attendance_break_start",
    )
    def break_start(attendance_id: int):
        data = json_body()
        return ok(service.start_break(attendance_id, at=_optional_time(data.get("time"))))

    @app.route(
        "/api/attendance/<int:attendance_id>/breaks/end",
        methods=["POST"],
        endpoint="api_attendance_break_end",
    )
    def break_end(attendance_id: int):
        data = json_body()
        return ok(service.end_break(attendance_id, at=_optional_time(data.get("time"))))

    @app.route("/api/attendance/leave", methods=["POST"], endpoint="api_attendance_mark_leave")
    def mark_leave():
        data = json_body()
        if not data.get("date"):
            raise ValidationError("date is required")
        record = service.mark_leave(
            require_int(data.get("employee_id"), "employee_id"),
            employee_name=str(data.get("employee_name") or ""),
            work_date=parse_iso_date(str(data["date"])),
            leave_type=data.get("leave_type"),
            reason=str(data.get("reason") or ""),
        )
        return ok(record, 201, message="Leave marked successfully")

    @app.route("/api/attendance/<int:attendance_id>/leave", methods=["PATCH"], endpoint="api_attendance_update_leave")
    def update_leave(attendance_id: int):
        data = json_body()
        record = service.update_leave(attendance_id, leave_type=data.get("leave_type"), reason=data.get("reason"))
        return ok(record)

    @app.route("/api/attendance/<int:attendance_id>/leave", methods=["DELETE"], endpoint="api_attendance_cancel_leave")
    def cancel_leave(attendance_id: int):
        record = service.cancel_leave(attendance_id)
        return ok(record, message="Leave cancelled")

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="api_attendance_get")
    def get_record(attendance_id: int):
        return ok(service.get_record(attendance_id))

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    def list_records():
        day = parse_optional_date(request.args.get("date"))
        employee_id = optional_int(request.args.get("employee_id"), "employee_id")

        if employee_id is None:
            if day is None:
                raise ValidationError("employee_id or date is required")
            return ok(service.list_for_date(day))

        if day is not None:
            record = service.get_day_record(employee_id, day)
            return ok(record, day_status=service.day_status(employee_id, day))

        records = service.list_for_employee(
            employee_id,
            start_date=parse_optional_date(request.args.get("start")),
            end_date=parse_optional_date(request.args.get("end")),
            limit=optional_int(request.args.get("limit"), "limit"),
        )
        return ok(records)

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_attendance_stats")
    def stats():
        employee_id = require_int(request.args.get("employee_id"), "employee_id")
        return ok(service.attendance_stats(employee_id, today=parse_optional_date(request.args.get("today"))))

    @app.route("/api/attendance/leave-stats", methods=["GET"], endpoint="api_attendance_leave_stats")
    def leave_stats():
        employee_id = require_int(request.args.get("employee_id"), "employee_id")
        return ok(
            service.leave_stats(
                employee_id,
                year=optional_int(request.args.get("year"), "year"),
                month=optional_int(request.args.get("month"), "month"),
            )
        )
