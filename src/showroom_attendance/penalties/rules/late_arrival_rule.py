from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.constants import MINUTES_PER_HOUR
from ...core.enums import PenaltyType
from ..model import PenaltyDraft
from .base import PenaltyRule, RuleContext


class LateArrivalRule(PenaltyRule):
    """Minutes late beyond the threshold, charged pro rata at the hourly rate."""

    def evaluate(self, ctx: RuleContext) -> Optional[PenaltyDraft]:
        check_in = ctx.record.check_in_time
        if check_in is None:
            return None

        late_minutes = minutes_between(ctx.settings.expected_check_in_time, check_in)
        threshold = int(ctx.settings.late_arrival_threshold_minutes)
        if late_minutes <= threshold:
            return None

        excess = late_minutes - threshold
        return PenaltyDraft(
            type=PenaltyType.LATE_ARRIVAL,
            amount=excess / MINUTES_PER_HOUR * float(ctx.settings.hourly_penalty_rate),
            reason=f"Late arrival: {late_minutes} min after {ctx.settings.expected_check_in_time:%H:%M} ({threshold} min allowed)",
        )
