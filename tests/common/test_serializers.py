from datetime import date, datetime, time

from showroom_attendance.attendance.model import AttendanceRecord, Break, GeoPoint
from showroom_attendance.common.serializers import to_json_ready
from showroom_attendance.core.enums import AttendanceStatus


def test_record_becomes_plain_json():
    record = AttendanceRecord(
        attendance_id=1,
        employee_id=7,
        employee_name="Asha",
        work_date=date(2024, 1, 10),
        status=AttendanceStatus.ON_BREAK,
        check_in_time=time(9, 0),
        check_in_location=GeoPoint(latitude=1.5, longitude=2.5),
        breaks=(Break(start_time=time(13, 0)),),
        created_at=datetime(2024, 1, 10, 9, 0, 12),
    )

    data = to_json_ready(record)

    assert data["status"] == "on_break"
    assert data["work_date"] == "2024-01-10"
    assert data["check_in_time"] == "09:00"
    assert data["check_in_location"] == {"latitude": 1.5, "longitude": 2.5, "accuracy": None}
    assert data["breaks"] == [{"start_time": "13:00", "end_time": None, "duration_minutes": 0}]
    assert data["created_at"] == "2024-01-10T09:00:12"
