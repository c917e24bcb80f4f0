from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, read_hhmm, write_hhmm
from .model import PenaltySettings
from .repository import PenaltySettingsRepository


class MySQLPenaltySettingsRepository(PenaltySettingsRepository):
    """One settings row per business unit."""

    def __init__(self, conn_factory: DatabaseConnection, business_unit: str):
        self._conn_factory = conn_factory
        self._business_unit = business_unit

    def get(self) -> Optional[PenaltySettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT hourly_penalty_rate, leave_penalty_rate,
                       late_arrival_threshold_minutes, early_departure_threshold_minutes,
                       working_hours_per_day, expected_check_in_time, expected_check_out_time,
                       paid_leaves_per_month, weekend_penalty_enabled, holiday_penalty_enabled,
                       auto_apply_penalties, updated_at, updated_by
                FROM penalty_settings
                WHERE business_unit=%s
                """,
                (self._business_unit,),
            )
            r = cur.fetchone()
            if not r:
                return None
            return PenaltySettings(
                hourly_penalty_rate=float(r["hourly_penalty_rate"]),
                leave_penalty_rate=float(r["leave_penalty_rate"]),
                late_arrival_threshold_minutes=int(r["late_arrival_threshold_minutes"]),
                early_departure_threshold_minutes=int(r["early_departure_threshold_minutes"]),
                working_hours_per_day=float(r["working_hours_per_day"]),
                expected_check_in_time=read_hhmm(r["expected_check_in_time"]),
                expected_check_out_time=read_hhmm(r["expected_check_out_time"]),
                paid_leaves_per_month=int(r["paid_leaves_per_month"]),
                weekend_penalty_enabled=bool(r["weekend_penalty_enabled"]),
                holiday_penalty_enabled=bool(r["holiday_penalty_enabled"]),
                auto_apply_penalties=bool(r["auto_apply_penalties"]),
                updated_at=r.get("updated_at"),
                updated_by=r.get("updated_by"),
            )

    def save(self, settings: PenaltySettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO penalty_settings(
                    business_unit, hourly_penalty_rate, leave_penalty_rate,
                    late_arrival_threshold_minutes, early_departure_threshold_minutes,
                    working_hours_per_day, expected_check_in_time, expected_check_out_time,
                    paid_leaves_per_month, weekend_penalty_enabled, holiday_penalty_enabled,
                    auto_apply_penalties, updated_at, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    hourly_penalty_rate=VALUES(hourly_penalty_rate),
                    leave_penalty_rate=VALUES(leave_penalty_rate),
                    late_arrival_threshold_minutes=VALUES(late_arrival_threshold_minutes),
                    early_departure_threshold_minutes=VALUES(early_departure_threshold_minutes),
                    working_hours_per_day=VALUES(working_hours_per_day),
                    expected_check_in_time=VALUES(expected_check_in_time),
                    expected_check_out_time=VALUES(expected_check_out_time),
                    paid_leaves_per_month=VALUES(paid_leaves_per_month),
                    weekend_penalty_enabled=VALUES(weekend_penalty_enabled),
                    holiday_penalty_enabled=VALUES(holiday_penalty_enabled),
                    auto_apply_penalties=VALUES(auto_apply_penalties),
                    updated_at=VALUES(updated_at),
                    updated_by=VALUES(updated_by)
                """,
                (
                    self._business_unit,
                    settings.hourly_penalty_rate,
                    settings.leave_penalty_rate,
                    settings.late_arrival_threshold_minutes,
                    settings.early_departure_threshold_minutes,
                    settings.working_hours_per_day,
                    write_hhmm(settings.expected_check_in_time),
                    write_hhmm(settings.expected_check_out_time),
                    settings.paid_leaves_per_month,
                    int(settings.weekend_penalty_enabled),
                    int(settings.holiday_penalty_enabled),
                    int(settings.auto_apply_penalties),
                    settings.updated_at,
                    settings.updated_by,
                ),
            )
