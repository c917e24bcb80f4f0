from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.checklist import ChecklistNotifier
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .common.locking import KeyedLock
from .core.constants import DEFAULT_BUSINESS_UNIT
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import SalaryService
from .penalties.holidays import HolidayCalendar
from .penalties.lifecycle import PenaltyLifecycleManager
from .penalties.mysql_penalty_repository import MySQLPenaltyRepository
from .penalties.mysql_settings_repository import MySQLPenaltySettingsRepository
from .penalties.repository import PenaltyRepository, PenaltySettingsRepository
from .penalties.service import PenaltyService
from .penalties.settings_service import PenaltySettingsService


@dataclass(frozen=True)
class Container:
    business_unit: str

    attendance_repo: AttendanceRepository
    penalties_repo: PenaltyRepository
    settings_repo: PenaltySettingsRepository

    attendance_service: AttendanceService
    penalty_service: PenaltyService
    penalty_lifecycle: PenaltyLifecycleManager
    settings_service: PenaltySettingsService
    salary_service: SalaryService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    business_unit: str,
    attendance_repo: AttendanceRepository,
    penalties_repo: PenaltyRepository,
    settings_repo: PenaltySettingsRepository,
    checklist: Optional[ChecklistNotifier] = None,
    holidays: Optional[HolidayCalendar] = None,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the service graph on top of any repository implementations."""
    locks = KeyedLock()

    settings_service = PenaltySettingsService(settings_repo, clock=clock)
    penalty_service = PenaltyService(
        penalties_repo,
        attendance_repo,
        settings_service,
        holidays=holidays,
        clock=clock,
    )
    penalty_lifecycle = PenaltyLifecycleManager(penalties_repo, clock=clock, locks=locks)
    attendance_service = AttendanceService(
        attendance_repo,
        penalties=penalty_service,
        lifecycle=penalty_lifecycle,
        checklist=checklist,
        clock=clock,
        locks=locks,
    )
    salary_service = SalaryService(attendance_repo, penalties_repo)

    return Container(
        business_unit=business_unit,
        attendance_repo=attendance_repo,
        penalties_repo=penalties_repo,
        settings_repo=settings_repo,
        attendance_service=attendance_service,
        penalty_service=penalty_service,
        penalty_lifecycle=penalty_lifecycle,
        settings_service=settings_service,
        salary_service=salary_service,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    business_unit: str = DEFAULT_BUSINESS_UNIT,
    checklist: Optional[ChecklistNotifier] = None,
    holidays: Optional[HolidayCalendar] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire_services(
        business_unit=business_unit,
        attendance_repo=MySQLAttendanceRepository(conn, business_unit),
        penalties_repo=MySQLPenaltyRepository(conn, business_unit),
        settings_repo=MySQLPenaltySettingsRepository(conn, business_unit),
        checklist=checklist,
        holidays=holidays,
        conn=conn,
    )
