from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ChecklistNotifier(Protocol):
    """Checklist-assignment subsystem, notified on attendance events.

    Calls are fire-and-forget: return values are only logged.
    """

    def on_check_in(self, employee_id: int, work_date: date) -> Any:
        raise NotImplementedError

    def on_leave_marked(self, employee_id: int, work_date: date) -> Any:
        raise NotImplementedError

    def on_leave_cancelled(self, employee_id: int, work_date: date) -> Any:
        raise NotImplementedError


class LoggingChecklistNotifier:
    """Default notifier when no checklist subsystem is wired in."""

    def on_check_in(self, employee_id: int, work_date: date) -> None:
        logger.info("checklist: generate assignments employee=%s date=%s", employee_id, work_date)

    def on_leave_marked(self, employee_id: int, work_date: date) -> None:
        logger.info("checklist: reassign pending items employee=%s date=%s", employee_id, work_date)

    def on_leave_cancelled(self, employee_id: int, work_date: date) -> None:
        logger.info("checklist: restore assignments employee=%s date=%s", employee_id, work_date)
