from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import is_sunday
from ..core.enums import AttendanceStatus
from .model import PenaltyDraft, PenaltySettings
from .rules.base import PenaltyRule, RuleContext
from .rules.early_departure_rule import EarlyDepartureRule
from .rules.incomplete_hours_rule import IncompleteHoursRule
from .rules.late_arrival_rule import LateArrivalRule
from .rules.leave_quota_rule import LeaveQuotaRule


def _default_work_day_rules() -> tuple[PenaltyRule, ...]:
    return (IncompleteHoursRule(), LateArrivalRule(), EarlyDepartureRule())


def _default_leave_day_rules() -> tuple[PenaltyRule, ...]:
    return (LeaveQuotaRule(),)


@dataclass
class PenaltyRuleEngine:
    """Factory Pattern: choose the rule set for a finalized day and run it.

    Pure: no storage access. Amounts are left unrounded.
    """

    work_day_rules: Sequence[PenaltyRule] = field(default_factory=_default_work_day_rules)
    leave_day_rules: Sequence[PenaltyRule] = field(default_factory=_default_leave_day_rules)

    def rules_for(self, record: AttendanceRecord) -> Sequence[PenaltyRule]:
        if record.status == AttendanceStatus.CHECKED_OUT:
            return self.work_day_rules
        if record.status == AttendanceStatus.ON_LEAVE:
            return self.leave_day_rules
        return ()

    def evaluate(
        self,
        record: AttendanceRecord,
        settings: PenaltySettings,
        *,
        leaves_taken_this_month: int = 0,
        is_holiday: bool = False,
    ) -> list[PenaltyDraft]:
        ctx = RuleContext(record=record, settings=settings, leaves_taken_this_month=int(leaves_taken_this_month))

        drafts: list[PenaltyDraft] = []
        for rule in self.rules_for(record):
            draft = rule.evaluate(ctx)
            if draft is not None and draft.amount > 0:
                drafts.append(draft)

        if record.status != AttendanceStatus.CHECKED_OUT or not drafts:
            return drafts

        # Day-level waivers drop every work-day penalty at once.
        sunday = is_sunday(record.work_date)
        if sunday and not settings.weekend_penalty_enabled:
            return []
        if is_holiday and not settings.holiday_penalty_enabled:
            return []

        if sunday:
            drafts = [replace(d, reason=f"{d.reason} (Sunday work)") for d in drafts]
        return drafts
