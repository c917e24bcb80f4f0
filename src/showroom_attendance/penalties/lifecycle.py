from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.locking import KeyedLock
from ..common.validators import require_non_empty
from ..core.enums import PenaltyStatus, PenaltyType
from ..core.exceptions import NotFoundError
from .model import Penalty
from .repository import PenaltyRepository

logger = logging.getLogger(__name__)


class PenaltyLifecycleManager:
    """Soft-removes penalties (active -> removed) with a mandatory actor and reason.

    Salary is never cached here; callers recalculate after a removal.
    """

    def __init__(
        self,
        penalties: PenaltyRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        locks: Optional[KeyedLock] = None,
    ):
        self._penalties = penalties
        self._clock = clock
        self._locks = locks or KeyedLock()

    def remove_single(self, penalty_id: int, *, actor: str, reason: str) -> Penalty:
        actor, reason = self._require_audit(actor, reason)
        with self._locks.hold(("penalty", int(penalty_id))):
            penalty = self._penalties.get_by_id(int(penalty_id))
            if not penalty or not penalty.is_active:
                raise NotFoundError("Penalty not found or already removed")
            removed = self._mark_removed(penalty, actor=actor, reason=reason)

        logger.info("Penalty %s removed by %s: %s", penalty_id, actor, reason)
        return removed

    def remove_for_day(self, employee_id: int, day: date, *, actor: str, reason: str) -> list[Penalty]:
        actor, reason = self._require_audit(actor, reason)
        return self._remove_many(
            self._penalties.list_for_employee(
                int(employee_id), start_date=day, end_date=day, status=PenaltyStatus.ACTIVE
            ),
            actor=actor,
            reason=reason,
        )

    def remove_for_month(self, employee_id: int, year: int, month: int, *, actor: str, reason: str) -> list[Penalty]:
        actor, reason = self._require_audit(actor, reason)
        start, end = month_bounds(year, month)
        return self._remove_many(
            self._penalties.list_for_employee(
                int(employee_id), start_date=start, end_date=end, status=PenaltyStatus.ACTIVE
            ),
            actor=actor,
            reason=reason,
        )

    def remove_leave_penalties(self, employee_id: int, day: date, *, actor: str, reason: str) -> list[Penalty]:
        actor, reason = self._require_audit(actor, reason)
        candidates = self._penalties.list_for_employee(
            int(employee_id), start_date=day, end_date=day, status=PenaltyStatus.ACTIVE
        )
        return self._remove_many(
            [p for p in candidates if p.type == PenaltyType.LEAVE],
            actor=actor,
            reason=reason,
        )

    def _remove_many(self, candidates: Sequence[Penalty], *, actor: str, reason: str) -> list[Penalty]:
        removed: list[Penalty] = []
        for candidate in candidates:
            with self._locks.hold(("penalty", candidate.penalty_id)):
                # Another caller may have removed it since the listing.
                current = self._penalties.get_by_id(candidate.penalty_id)
                if not current or not current.is_active:
                    continue
                removed.append(self._mark_removed(current, actor=actor, reason=reason))

        if removed:
            logger.info("Removed %d penalties by %s: %s", len(removed), actor, reason)
        return removed

    def _mark_removed(self, penalty: Penalty, *, actor: str, reason: str) -> Penalty:
        removed = dataclasses.replace(
            penalty,
            status=PenaltyStatus.REMOVED,
            removed_by=actor,
            removed_at=self._clock(),
            removal_reason=reason,
        )
        self._penalties.save(removed)
        return removed

    @staticmethod
    def _require_audit(actor: str, reason: str) -> tuple[str, str]:
        return require_non_empty(actor, "Actor"), require_non_empty(reason, "Reason")
