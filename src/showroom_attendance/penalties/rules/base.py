from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...attendance.model import AttendanceRecord
from ..model import PenaltyDraft, PenaltySettings


@dataclass(frozen=True)
class RuleContext:
    record: AttendanceRecord
    settings: PenaltySettings
    leaves_taken_this_month: int = 0


class PenaltyRule(ABC):
    """Strategy Pattern: one independent penalty rule."""

    @abstractmethod
    def evaluate(self, ctx: RuleContext) -> Optional[PenaltyDraft]:
        """Return a draft, or None when the rule does not charge anything."""

        raise NotImplementedError
