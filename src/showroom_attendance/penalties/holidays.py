from __future__ import annotations

from datetime import date
from typing import Protocol


class HolidayCalendar(Protocol):
    def is_holiday(self, day: date) -> bool:
        raise NotImplementedError


class NoHolidays:
    """Used when no holiday calendar is configured: holiday waivers never apply."""

    def is_holiday(self, day: date) -> bool:
        return False
