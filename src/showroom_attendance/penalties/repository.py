from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PenaltyStatus
from .model import NewPenalty, Penalty, PenaltySettings


class PenaltyRepository(Protocol):
    def create(self, penalty: NewPenalty) -> Penalty:
        raise NotImplementedError

    def get_by_id(self, penalty_id: int) -> Optional[Penalty]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[PenaltyStatus] = None,
    ) -> Sequence[Penalty]:
        """Penalties of one employee in the inclusive range, newest day first."""

        raise NotImplementedError

    def save(self, penalty: Penalty) -> bool:
        raise NotImplementedError


class PenaltySettingsRepository(Protocol):
    def get(self) -> Optional[PenaltySettings]:
        raise NotImplementedError

    def save(self, settings: PenaltySettings) -> None:
        raise NotImplementedError
