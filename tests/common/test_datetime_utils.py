from datetime import date, time

import pytest

from showroom_attendance.common.datetime_utils import (
    format_hhmm,
    is_sunday,
    minutes_between,
    month_bounds,
    parse_hhmm,
    parse_iso_date,
)
from showroom_attendance.core.exceptions import ValidationError


def test_parse_hhmm_drops_seconds():
    assert parse_hhmm("09:05") == time(9, 5)
    assert parse_hhmm("17:45:59") == time(17, 45)


@pytest.mark.parametrize("value", ["", "9am", "25:00", None])
def test_parse_hhmm_rejects_garbage(value):
    with pytest.raises(ValidationError):
        parse_hhmm(value)


def test_parse_iso_date():
    assert parse_iso_date("2024-01-10") == date(2024, 1, 10)
    with pytest.raises(ValidationError):
        parse_iso_date("10/01/2024")


def test_minutes_between_is_signed():
    assert minutes_between(time(9, 0), time(9, 30)) == 30
    assert minutes_between(time(9, 30), time(9, 0)) == -30


def test_month_bounds_handles_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValidationError):
        month_bounds(2024, 0)


def test_only_sunday_is_weekend():
    assert is_sunday(date(2024, 1, 14))
    assert not is_sunday(date(2024, 1, 13))


def test_format_hhmm():
    assert format_hhmm(time(7, 3)) == "07:03"
    assert format_hhmm(None) is None
