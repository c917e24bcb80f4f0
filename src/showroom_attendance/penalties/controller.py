from __future__ import annotations

from datetime import date
from typing import Any, Optional

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.http import json_body, ok, require_int
from ..core.enums import PenaltyStatus, PenaltyType
from ..core.exceptions import ValidationError
from ..container import Container


def _parse_status(raw: Optional[str]) -> Optional[PenaltyStatus]:
    if not raw:
        return None
    try:
        return PenaltyStatus(raw)
    except ValueError:
        raise ValidationError(f"Unknown penalty status {raw!r}")


def register(app: Flask, container: Container) -> None:
    penalties = container.penalty_service
    lifecycle = container.penalty_lifecycle
    settings = container.settings_service
    salary = container.salary_service

    def _salary_after_removal(data: dict, employee_id: int, day: date) -> Any:
        # Salary is recalculated, never patched, after penalties change.
        if data.get("base_salary") in (None, ""):
            return None
        return salary.calculate_month(employee_id, data["base_salary"], day.year, day.month)

    @app.route("/api/penalties", methods=["GET"], endpoint="api_penalties_list")
    def list_penalties():
        employee_id = require_int(request.args.get("employee_id"), "employee_id")
        items = penalties.list_penalties(
            employee_id,
            start_date=parse_optional_date(request.args.get("start")),
            end_date=parse_optional_date(request.args.get("end")),
            status=_parse_status(request.args.get("status")),
        )
        active_total = round(sum(p.amount for p in items if p.is_active), 2)
        return ok(items, active_total=active_total)

    @app.route("/api/penalties", methods=["POST"], endpoint="api_penalties_apply")
    def apply_manual():
        data = json_body()
        if not data.get("date"):
            raise ValidationError("date is required")
        penalty = penalties.apply_manual(
            employee_id=require_int(data.get("employee_id"), "employee_id"),
            employee_name=str(data.get("employee_name") or ""),
            day=parse_iso_date(str(data["date"])),
            amount=data.get("amount"),
            reason=str(data.get("reason") or ""),
            applied_by=str(data.get("applied_by") or ""),
            penalty_type=data.get("type") or PenaltyType.MANUAL,
        )
        return ok(penalty, 201, message="Penalty applied")

    @app.route("/api/penalties/<int:penalty_id>", methods=["GET"], endpoint="api_penalties_get")
    def get_penalty(penalty_id: int):
        return ok(penalties.get_penalty(penalty_id))

    @app.route("/api/penalties/<int:penalty_id>/remove", methods=["POST"], endpoint="api_penalties_remove")
    def remove_single(penalty_id: int):
        data = json_body()
        removed = lifecycle.remove_single(
            penalty_id,
            actor=str(data.get("actor") or ""),
            reason=str(data.get("reason") or ""),
        )
        return ok(
            [removed],
            salary=_salary_after_removal(data, removed.employee_id, removed.date),
            message="Penalty removed",
        )

    @app.route("/api/penalties/remove-day", methods=["POST"], endpoint="api_penalties_remove_day")
    def remove_for_day():
        data = json_body()
        if not data.get("date"):
            raise ValidationError("date is required")
        employee_id = require_int(data.get("employee_id"), "employee_id")
        day = parse_iso_date(str(data["date"]))
        removed = lifecycle.remove_for_day(
            employee_id,
            day,
            actor=str(data.get("actor") or ""),
            reason=str(data.get("reason") or ""),
        )
        return ok(
            removed,
            salary=_salary_after_removal(data, employee_id, day),
            message=f"{len(removed)} penalties removed",
        )

    @app.route("/api/penalties/remove-month", methods=["POST"], endpoint="api_penalties_remove_month")
    def remove_for_month():
        data = json_body()
        employee_id = require_int(data.get("employee_id"), "employee_id")
        year = require_int(data.get("year"), "year")
        month = require_int(data.get("month"), "month")
        removed = lifecycle.remove_for_month(
            employee_id,
            year,
            month,
            actor=str(data.get("actor") or ""),
            reason=str(data.get("reason") or ""),
        )
        return ok(
            removed,
            salary=_salary_after_removal(data, employee_id, date(year, month, 1)),
            message=f"{len(removed)} penalties removed",
        )

    @app.route("/api/penalty-settings", methods=["GET"], endpoint="api_penalty_settings_get")
    def get_settings():
        return ok(settings.get_settings())

    @app.route("/api/penalty-settings", methods=["PUT"], endpoint="api_penalty_settings_update")
    def update_settings():
        data = dict(json_body())
        actor = str(data.pop("actor", "") or "")
        return ok(settings.update_settings(actor=actor, **data), message="Settings updated")
