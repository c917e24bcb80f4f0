from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, time
from typing import Any, Callable

from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import require_non_empty, require_non_negative
from ..core.exceptions import ValidationError
from .model import PenaltySettings
from .repository import PenaltySettingsRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset(
    f.name for f in dataclasses.fields(PenaltySettings) if f.name not in {"updated_at", "updated_by"}
)
_BOOL_FIELDS = frozenset(
    {"weekend_penalty_enabled", "holiday_penalty_enabled", "auto_apply_penalties"}
)
_INT_FIELDS = frozenset(
    {"late_arrival_threshold_minutes", "early_departure_threshold_minutes", "paid_leaves_per_month"}
)
_TIME_FIELDS = frozenset({"expected_check_in_time", "expected_check_out_time"})


def _coerce_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes", "on"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no", "off"}:
        return False
    if isinstance(value, int):
        return bool(value)
    raise ValidationError(f"{field_name} must be true or false")


class PenaltySettingsService:
    """Read-mostly business unit settings, created with defaults on first access.

    Saving new settings never touches penalties that were already applied.
    """

    def __init__(
        self,
        settings: PenaltySettingsRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._settings = settings
        self._clock = clock

    def get_settings(self) -> PenaltySettings:
        current = self._settings.get()
        if current is not None:
            return current

        defaults = PenaltySettings(updated_at=self._clock(), updated_by="system")
        self._settings.save(defaults)
        logger.info("Created default penalty settings")
        return defaults

    def update_settings(self, *, actor: str, **changes: Any) -> PenaltySettings:
        actor = require_non_empty(actor, "Actor")

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        cleaned = {name: self._coerce(name, value) for name, value in changes.items()}
        updated = dataclasses.replace(
            self.get_settings(),
            **cleaned,
            updated_at=self._clock(),
            updated_by=actor,
        )
        self._validate(updated)
        self._settings.save(updated)
        logger.info("Penalty settings updated by %s: %s", actor, sorted(cleaned))
        return updated

    @staticmethod
    def _coerce(name: str, value: Any) -> Any:
        if name in _BOOL_FIELDS:
            return _coerce_bool(value, name)
        if name in _TIME_FIELDS:
            return value if isinstance(value, time) else parse_hhmm(str(value))
        number = require_non_negative(value, name)
        if name in _INT_FIELDS:
            if number != int(number):
                raise ValidationError(f"{name} must be a whole number")
            return int(number)
        return number

    @staticmethod
    def _validate(settings: PenaltySettings) -> None:
        if not 0 < settings.working_hours_per_day <= 24:
            raise ValidationError("Working hours per day must be between 0 and 24")
        if settings.expected_check_out_time <= settings.expected_check_in_time:
            raise ValidationError("Expected check-out time must be after expected check-in time")

