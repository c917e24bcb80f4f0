from __future__ import annotations

from typing import Optional

from ...core.enums import PenaltyType
from ..model import PenaltyDraft
from .base import PenaltyRule, RuleContext


class LeaveQuotaRule(PenaltyRule):
    """Flat leave penalty once the month's paid leaves are used up."""

    def evaluate(self, ctx: RuleContext) -> Optional[PenaltyDraft]:
        if ctx.leaves_taken_this_month < int(ctx.settings.paid_leaves_per_month):
            return None

        amount = float(ctx.settings.leave_penalty_rate)
        if amount <= 0:
            return None

        leave_type = ctx.record.leave_type.value if ctx.record.leave_type else "unspecified"
        return PenaltyDraft(
            type=PenaltyType.LEAVE,
            amount=amount,
            reason=f"Leave penalty for {leave_type} leave (exceeded paid leave quota of {ctx.settings.paid_leaves_per_month})",
        )
