from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily attendance state. NOT_CHECKED_IN is never stored: it means no record exists."""

    NOT_CHECKED_IN = "not_checked_in"
    CHECKED_IN = "checked_in"
    ON_BREAK = "on_break"
    CHECKED_OUT = "checked_out"
    ON_LEAVE = "on_leave"


class LeaveType(str, Enum):
    SICK = "sick"
    PERSONAL = "personal"
    EMERGENCY = "emergency"
    VACATION = "vacation"
    MEDICAL = "medical"
    FAMILY = "family"
    OTHER = "other"


class PenaltyType(str, Enum):
    HOURLY = "hourly"
    LEAVE = "leave"
    MANUAL = "manual"
    LATE_ARRIVAL = "late_arrival"
    EARLY_DEPARTURE = "early_departure"
    INCOMPLETE_HOURS = "incomplete_hours"


class PenaltyStatus(str, Enum):
    """Soft-delete lifecycle of a penalty (removed rows are kept for audit)."""

    ACTIVE = "active"
    REMOVED = "removed"
    EXPIRED = "expired"


# Penalty types reported together under the "hourly" salary bucket.
HOURLY_PENALTY_TYPES = frozenset(
    {
        PenaltyType.HOURLY,
        PenaltyType.INCOMPLETE_HOURS,
        PenaltyType.LATE_ARRIVAL,
        PenaltyType.EARLY_DEPARTURE,
    }
)
