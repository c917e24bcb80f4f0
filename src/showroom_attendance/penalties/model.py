from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core import constants
from ..core.enums import PenaltyStatus, PenaltyType


@dataclass(frozen=True)
class PenaltySettings:
    """Penalty policy of one business unit."""

    hourly_penalty_rate: float = constants.DEFAULT_HOURLY_PENALTY_RATE
    leave_penalty_rate: float = constants.DEFAULT_LEAVE_PENALTY_RATE
    late_arrival_threshold_minutes: int = constants.DEFAULT_LATE_ARRIVAL_THRESHOLD_MINUTES
    early_departure_threshold_minutes: int = constants.DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES
    working_hours_per_day: float = constants.DEFAULT_WORKING_HOURS_PER_DAY
    expected_check_in_time: time = constants.DEFAULT_EXPECTED_CHECK_IN
    expected_check_out_time: time = constants.DEFAULT_EXPECTED_CHECK_OUT
    paid_leaves_per_month: int = constants.DEFAULT_PAID_LEAVES_PER_MONTH
    weekend_penalty_enabled: bool = False
    holiday_penalty_enabled: bool = False
    auto_apply_penalties: bool = True
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class PenaltyDraft:
    """Rule engine output: an unpersisted, unrounded penalty line."""

    type: PenaltyType
    amount: float
    reason: str


@dataclass(frozen=True)
class NewPenalty:
    employee_id: int
    employee_name: str
    date: date
    type: PenaltyType
    amount: float
    reason: str
    applied_by: str
    applied_at: datetime
    attendance_id: Optional[int] = None


@dataclass(frozen=True)
class Penalty:
    """Domain entity: a salary deduction candidate, soft-deleted on removal."""

    penalty_id: int
    employee_id: int
    employee_name: str
    date: date
    type: PenaltyType
    amount: float
    reason: str
    applied_by: str
    applied_at: datetime
    status: PenaltyStatus = PenaltyStatus.ACTIVE
    attendance_id: Optional[int] = None
    removed_by: Optional[str] = None
    removed_at: Optional[datetime] = None
    removal_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == PenaltyStatus.ACTIVE
