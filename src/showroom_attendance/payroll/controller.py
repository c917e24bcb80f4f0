from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import month_bounds, parse_iso_date
from ..common.http import json_body, ok, require_int
from ..common.serializers import to_json_ready
from ..core.exceptions import ValidationError
from ..container import Container
from .model import EmployeeSalary


def register(app: Flask, container: Container) -> None:
    salary = container.salary_service

    @app.route("/api/salary", methods=["GET"], endpoint="api_salary_calculate")
    def calculate():
        args = request.args
        employee_id = require_int(args.get("employee_id"), "employee_id")
        if args.get("base_salary") in (None, ""):
            raise ValidationError("base_salary is required")

        if args.get("start") and args.get("end"):
            start, end = parse_iso_date(args["start"]), parse_iso_date(args["end"])
        elif args.get("year") and args.get("month"):
            start, end = month_bounds(require_int(args["year"], "year"), require_int(args["month"], "month"))
        else:
            raise ValidationError("Provide start and end, or year and month")

        return ok(salary.calculate(employee_id, args["base_salary"], start, end))

    @app.route("/api/salary/monthly-report", methods=["POST"], endpoint="api_salary_monthly_report")
    def monthly_report():
        data = json_body()
        raw_employees = data.get("employees") or []
        if not isinstance(raw_employees, list):
            raise ValidationError("employees must be a list")

        if not all(isinstance(e, dict) for e in raw_employees):
            raise ValidationError("Each employee must be an object")

        employees = [
            EmployeeSalary(
                employee_id=require_int(e.get("employee_id"), "employee_id"),
                base_salary=e.get("base_salary", 0),
                employee_name=str(e.get("employee_name") or ""),
            )
            for e in raw_employees
        ]
        report = salary.build_monthly_report(
            require_int(data.get("year"), "year"),
            require_int(data.get("month"), "month"),
            employees,
            include_empty=bool(data.get("include_empty", False)),
        )
        summary = {
            "total_base_salary": report.total_base_salary,
            "total_penalties": report.total_penalties,
            "total_final_salary": report.total_final_salary,
        }
        return ok(to_json_ready(report), summary=summary)
