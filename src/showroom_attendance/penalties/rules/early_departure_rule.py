from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.constants import MINUTES_PER_HOUR
from ...core.enums import PenaltyType
from ..model import PenaltyDraft
from .base import PenaltyRule, RuleContext


class EarlyDepartureRule(PenaltyRule):
    """Mirror of the late-arrival rule against the expected check-out time."""

    def evaluate(self, ctx: RuleContext) -> Optional[PenaltyDraft]:
        check_out = ctx.record.check_out_time
        if check_out is None:
            return None

        early_minutes = minutes_between(check_out, ctx.settings.expected_check_out_time)
        threshold = int(ctx.settings.early_departure_threshold_minutes)
        if early_minutes <= threshold:
            return None

        excess = early_minutes - threshold
        return PenaltyDraft(
            type=PenaltyType.EARLY_DEPARTURE,
            amount=excess / MINUTES_PER_HOUR * float(ctx.settings.hourly_penalty_rate),
            reason=f"Early departure: {early_minutes} min before {ctx.settings.expected_check_out_time:%H:%M} ({threshold} min allowed)",
        )
