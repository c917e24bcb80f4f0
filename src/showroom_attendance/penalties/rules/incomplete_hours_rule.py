from __future__ import annotations

from typing import Optional

from ...core.constants import MINUTES_PER_HOUR
from ...core.enums import PenaltyType
from ..model import PenaltyDraft
from .base import PenaltyRule, RuleContext


class IncompleteHoursRule(PenaltyRule):
    """Shortfall against the working day, charged per hour at the hourly rate."""

    def evaluate(self, ctx: RuleContext) -> Optional[PenaltyDraft]:
        worked_hours = ctx.record.total_work_minutes / MINUTES_PER_HOUR
        shortfall_hours = max(0.0, float(ctx.settings.working_hours_per_day) - worked_hours)
        amount = shortfall_hours * float(ctx.settings.hourly_penalty_rate)
        if amount <= 0:
            return None
        return PenaltyDraft(
            type=PenaltyType.INCOMPLETE_HOURS,
            amount=amount,
            reason=f"Incomplete work hours: worked {worked_hours:.2f}h of {ctx.settings.working_hours_per_day:g}h",
        )
