from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import PenaltyStatus, PenaltyType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import NewPenalty, Penalty
from .repository import PenaltyRepository

_COLUMNS = """
    penalty_id, employee_id, employee_name, penalty_date, penalty_type, amount, reason,
    applied_by, applied_at, status, attendance_id, removed_by, removed_at, removal_reason
"""


def _row_to_penalty(r: Dict[str, Any]) -> Penalty:
    return Penalty(
        penalty_id=int(r["penalty_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        date=r["penalty_date"],
        type=PenaltyType(r["penalty_type"]),
        amount=float(r["amount"]),
        reason=r["reason"],
        applied_by=r["applied_by"],
        applied_at=r["applied_at"],
        status=PenaltyStatus(r["status"]),
        attendance_id=int(r["attendance_id"]) if r.get("attendance_id") is not None else None,
        removed_by=r.get("removed_by"),
        removed_at=r.get("removed_at"),
        removal_reason=r.get("removal_reason"),
    )


class MySQLPenaltyRepository(PenaltyRepository):
    def __init__(self, conn_factory: DatabaseConnection, business_unit: str):
        self._conn_factory = conn_factory
        self._business_unit = business_unit

    def create(self, penalty: NewPenalty) -> Penalty:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO penalties(
                    business_unit, employee_id, employee_name, penalty_date, penalty_type,
                    amount, reason, applied_by, applied_at, status, attendance_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    self._business_unit,
                    penalty.employee_id,
                    penalty.employee_name,
                    penalty.date,
                    penalty.type.value,
                    penalty.amount,
                    penalty.reason,
                    penalty.applied_by,
                    penalty.applied_at,
                    PenaltyStatus.ACTIVE.value,
                    penalty.attendance_id,
                ),
            )
            penalty_id = int(cur.lastrowid)
        return Penalty(penalty_id=penalty_id, **{f.name: getattr(penalty, f.name) for f in dataclasses.fields(penalty)})

    def get_by_id(self, penalty_id: int) -> Optional[Penalty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM penalties WHERE penalty_id=%s AND business_unit=%s",
                (int(penalty_id), self._business_unit),
            )
            r = cur.fetchone()
            return _row_to_penalty(r) if r else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[PenaltyStatus] = None,
    ) -> Sequence[Penalty]:
        clauses = ["business_unit=%s", "employee_id=%s"]
        params: list[object] = [self._business_unit, int(employee_id)]
        if start_date is not None:
            clauses.append("penalty_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("penalty_date <= %s")
            params.append(end_date)
        if status is not None:
            clauses.append("status=%s")
            params.append(PenaltyStatus(status).value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM penalties
                WHERE {" AND ".join(clauses)}
                ORDER BY penalty_date DESC, penalty_id DESC
                """,
                tuple(params),
            )
            return [_row_to_penalty(r) for r in cur.fetchall()]

    def save(self, penalty: Penalty) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE penalties
                SET status=%s, removed_by=%s, removed_at=%s, removal_reason=%s
                WHERE penalty_id=%s AND business_unit=%s
                """,
                (
                    penalty.status.value,
                    penalty.removed_by,
                    penalty.removed_at,
                    penalty.removal_reason,
                    int(penalty.penalty_id),
                    self._business_unit,
                ),
            )
            return cur.rowcount > 0
