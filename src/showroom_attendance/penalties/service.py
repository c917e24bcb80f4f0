from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_date_range, require_non_empty, require_positive
from ..core.constants import CURRENCY_DECIMALS, SYSTEM_ACTOR
from ..core.enums import AttendanceStatus, PenaltyStatus, PenaltyType
from ..core.exceptions import NotFoundError, ValidationError
from .engine import PenaltyRuleEngine
from .holidays import HolidayCalendar, NoHolidays
from .model import NewPenalty, Penalty, PenaltyDraft, PenaltySettings
from .repository import PenaltyRepository
from .settings_service import PenaltySettingsService

logger = logging.getLogger(__name__)


class PenaltyService:
    """Applies penalties: automatically from the rule engine, or manually by an admin."""

    def __init__(
        self,
        penalties: PenaltyRepository,
        attendance: AttendanceRepository,
        settings_service: PenaltySettingsService,
        *,
        engine: Optional[PenaltyRuleEngine] = None,
        holidays: Optional[HolidayCalendar] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._penalties = penalties
        self._attendance = attendance
        self._settings = settings_service
        self._engine = engine or PenaltyRuleEngine()
        self._holidays = holidays or NoHolidays()
        self._clock = clock

    def count_other_leaves_in_month(self, employee_id: int, day: date) -> int:
        """Leave days recorded in day's month, excluding day itself."""

        start, end = month_bounds(day.year, day.month)
        records = self._attendance.list_for_employee(employee_id, start_date=start, end_date=end)
        return sum(1 for r in records if r.status == AttendanceStatus.ON_LEAVE and r.work_date != day)

    def evaluate(self, record: AttendanceRecord, settings: Optional[PenaltySettings] = None) -> list[PenaltyDraft]:
        settings = settings or self._settings.get_settings()
        leaves_taken = 0
        if record.status == AttendanceStatus.ON_LEAVE:
            leaves_taken = self.count_other_leaves_in_month(record.employee_id, record.work_date)
        return self._engine.evaluate(
            record,
            settings,
            leaves_taken_this_month=leaves_taken,
            is_holiday=self._holidays.is_holiday(record.work_date),
        )

    def auto_apply(self, record: AttendanceRecord) -> list[Penalty]:
        settings = self._settings.get_settings()
        if not settings.auto_apply_penalties:
            logger.debug("Auto-apply disabled, skipping attendance_id=%s", record.attendance_id)
            return []

        drafts = self.evaluate(record, settings)
        applied = [
            self._persist(
                employee_id=record.employee_id,
                employee_name=record.employee_name,
                day=record.work_date,
                penalty_type=d.type,
                amount=d.amount,
                reason=d.reason,
                applied_by=SYSTEM_ACTOR,
                attendance_id=record.attendance_id,
            )
            for d in drafts
        ]
        if applied:
            logger.info(
                "Applied %d penalties (total %.2f) to employee=%s date=%s",
                len(applied),
                sum(p.amount for p in applied),
                record.employee_id,
                record.work_date,
            )
        return applied

    def apply_manual(
        self,
        *,
        employee_id: int,
        employee_name: str,
        day: date,
        amount: float,
        reason: str,
        applied_by: str,
        penalty_type: PenaltyType = PenaltyType.MANUAL,
    ) -> Penalty:
        amount = require_positive(amount, "Penalty amount")
        reason = require_non_empty(reason, "Reason")
        applied_by = require_non_empty(applied_by, "Applied by")
        if int(employee_id) <= 0:
            raise ValidationError("Invalid employee")
        try:
            penalty_type = PenaltyType(penalty_type)
        except ValueError:
            raise ValidationError(f"Unknown penalty type {penalty_type!r}")

        penalty = self._persist(
            employee_id=int(employee_id),
            employee_name=(employee_name or "").strip(),
            day=day,
            penalty_type=penalty_type,
            amount=amount,
            reason=reason,
            applied_by=applied_by,
        )
        logger.info("Manual penalty %.2f applied to employee=%s by %s", penalty.amount, employee_id, applied_by)
        return penalty

    def get_penalty(self, penalty_id: int) -> Penalty:
        penalty = self._penalties.get_by_id(int(penalty_id))
        if not penalty:
            raise NotFoundError("Penalty not found")
        return penalty

    def list_penalties(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[PenaltyStatus] = None,
    ) -> Sequence[Penalty]:
        require_date_range(start_date, end_date)
        return self._penalties.list_for_employee(
            int(employee_id), start_date=start_date, end_date=end_date, status=status
        )

    def _persist(
        self,
        *,
        employee_id: int,
        employee_name: str,
        day: date,
        penalty_type: PenaltyType,
        amount: float,
        reason: str,
        applied_by: str,
        attendance_id: Optional[int] = None,
    ) -> Penalty:
        return self._penalties.create(
            NewPenalty(
                employee_id=employee_id,
                employee_name=employee_name,
                date=day,
                type=penalty_type,
                amount=round(float(amount), CURRENCY_DECIMALS),
                reason=reason,
                applied_by=applied_by,
                applied_at=self._clock(),
                attendance_id=attendance_id,
            )
        )
