from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Optional

from mysql.connector import errorcode

from ..common.datetime_utils import format_hhmm, parse_hhmm, truncate_to_minute
from .connection import DatabaseConnection

_MINUTES_PER_DAY = 24 * 60


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection per unit of work; commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def read_hhmm(value: Any) -> Optional[time]:
    """Read a TIME column as a minute-precision time of day.

    The connector returns TIME as a timedelta, some drivers as a string
    or a time. Attendance and settings times are compared at HH:MM, so
    any seconds part is dropped.
    """

    if value is None:
        return None

    if isinstance(value, time):
        return truncate_to_minute(value)

    if isinstance(value, timedelta):
        minutes = (int(value.total_seconds()) // 60) % _MINUTES_PER_DAY
        return time(hour=minutes // 60, minute=minutes % 60)

    if isinstance(value, str):
        return parse_hhmm(value)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def write_hhmm(value: Optional[time]) -> Optional[str]:
    return format_hhmm(value)


def is_duplicate_key(exc: Exception) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY
