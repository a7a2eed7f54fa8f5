from datetime import date, datetime

import pytest

from src.practicum_attendance.practicum_attendance.attendance.model import AttendanceRecord, ClockMetadata
from src.practicum_attendance.practicum_attendance.attendance.transitions import (
    apply_clock_in,
    apply_clock_out,
    find_duplicate_clock_in,
)
from src.practicum_attendance.practicum_attendance.core.enums import (
    AttendanceStatus,
    DeviceType,
    LocationType,
    Remark,
    SessionType,
)
from src.practicum_attendance.practicum_attendance.core.exceptions import PolicyViolationError, ValidationError


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, second)


def record(**kwargs) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=5, student_id=1, practicum_id=10, work_date=date(2026, 3, 2), day="Monday", **kwargs
    )


def test_first_clock_in_builds_new_record(agency):
    meta = ClockMetadata(latitude=14.6, longitude=121.0, device_type=DeviceType.MOBILE, photo_url="/uploads/a.jpg")

    t = apply_clock_in(None, agency, at(9), student_id=1, practicum_id=10, metadata=meta)

    assert t.is_new
    assert t.session_type == SessionType.MORNING
    assert t.remark == Remark.LATE
    assert t.record.morning_time_in == at(9)
    assert t.record.status == AttendanceStatus.LATE
    assert t.record.day == "Monday"
    assert t.record.photo_in == "/uploads/a.jpg"
    assert t.record.time_in_device_type == DeviceType.MOBILE
    assert t.detailed_log.session_type == SessionType.MORNING
    assert t.detailed_log.time_in_device_type == DeviceType.MOBILE
    assert t.detailed_log.time_in_location_type == LocationType.INSIDE


def test_on_time_clock_in_is_present(agency):
    t = apply_clock_in(None, agency, at(7, 55), student_id=1, practicum_id=10)

    assert t.remark == Remark.NORMAL
    assert t.record.status == AttendanceStatus.PRESENT


def test_repeat_within_window_is_duplicate(agency):
    r = record(morning_time_in=at(9), time_in_remarks=Remark.LATE)

    assert find_duplicate_clock_in(r, at(9, 0, 4)) == SessionType.MORNING
    t = apply_clock_in(r, agency, at(9, 0, 4), student_id=1, practicum_id=10)

    assert t.is_duplicate
    assert t.record is r
    assert t.remark == Remark.LATE
    assert t.detailed_log is None


def test_repeat_after_window_is_rejected(agency):
    r = record(morning_time_in=at(9))

    assert find_duplicate_clock_in(r, at(9, 0, 6)) is None
    with pytest.raises(ValidationError, match="active morning session"):
        apply_clock_in(r, agency, at(9, 0, 6), student_id=1, practicum_id=10)


def test_open_morning_past_lunch_is_cleared_before_afternoon_clock_in(agency):
    r = record(morning_time_in=at(8), time_in_remarks=Remark.NORMAL)

    t = apply_clock_in(r, agency, at(14), student_id=1, practicum_id=10)

    assert t.nullified == (SessionType.MORNING,)
    assert t.session_type == SessionType.AFTERNOON
    assert t.record.morning_time_in is None
    assert t.record.afternoon_time_in == at(14)
    assert t.record.record_id == 5
    assert not t.is_new


def test_fresh_clock_in_clears_nothing(agency):
    t = apply_clock_in(None, agency, at(8), student_id=1, practicum_id=10)

    assert t.nullified == ()


def test_non_operating_day_is_rejected(agency):
    saturday = datetime(2026, 3, 7, 8, 0)

    with pytest.raises(PolicyViolationError) as exc:
        apply_clock_in(None, agency, saturday, student_id=1, practicum_id=10)

    assert str(exc.value) == (
        "Today (Saturday) is not an operating day. "
        "Operating days: Monday,Tuesday,Wednesday,Thursday,Friday"
    )


def test_overtime_clock_in_after_full_day(agency):
    r = record(morning_time_in=at(8), morning_time_out=at(12), afternoon_time_in=at(13), afternoon_time_out=at(17))

    t = apply_clock_in(r, agency, at(18, 30), student_id=1, practicum_id=10)

    assert not t.is_new
    assert t.session_type == SessionType.OVERTIME
    assert t.record.overtime_time_in == at(18, 30)
    assert t.record.afternoon_time_out == at(17)


def test_clock_out_morning_computes_hours(agency):
    t = apply_clock_out(record(morning_time_in=at(8)), agency, at(12))

    assert t.session_type == SessionType.MORNING
    assert t.remark == Remark.NORMAL
    assert t.record.morning_time_out == at(12)
    assert t.record.hours == 4.0
    assert t.record.undertime_hours == 4.0
    assert t.within_expected_window


def test_early_clock_out_is_flagged(agency):
    t = apply_clock_out(record(morning_time_in=at(8)), agency, at(11))

    assert t.remark == Remark.EARLY_DEPARTURE
    assert not t.within_expected_window


def test_clock_out_keeps_previous_metadata(agency):
    r = record(morning_time_in=at(8), latitude=14.6, address="Main St")

    t = apply_clock_out(r, agency, at(12), metadata=ClockMetadata(address="Field site"))

    assert t.record.latitude == 14.6
    assert t.record.address == "Field site"


def test_clock_out_without_clock_in(agency):
    with pytest.raises(ValidationError, match="must clock in for the afternoon session"):
        apply_clock_out(record(), agency, at(17), session_hint=SessionType.AFTERNOON)


def test_double_clock_out(agency):
    r = record(morning_time_in=at(8), morning_time_out=at(12))

    with pytest.raises(ValidationError, match="already clocked out for the morning session"):
        apply_clock_out(r, agency, at(12, 5))


def test_overtime_past_cap_is_rejected(agency):
    r = record(
        morning_time_in=at(8),
        morning_time_out=at(12),
        afternoon_time_in=at(13),
        afternoon_time_out=at(17),
        overtime_time_in=at(18),
    )

    with pytest.raises(PolicyViolationError, match="maximum of 2 hours"):
        apply_clock_out(r, agency, at(20, 1))


def test_overtime_adds_to_total_but_not_undertime(agency):
    r = record(
        morning_time_in=at(8),
        morning_time_out=at(12),
        afternoon_time_in=at(13),
        afternoon_time_out=at(16),
        overtime_time_in=at(18),
    )

    t = apply_clock_out(r, agency, at(19, 30))

    assert t.overtime_hours == 1.5
    assert t.regular_hours == 7.0
    assert t.record.hours == 8.5
    assert t.record.undertime_hours == 1.0
