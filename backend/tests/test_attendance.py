"""
Tests for core/attendance.py — calendar window counts and the record-count fallback.
"""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.attendance import (
    compute_attendance,
    compute_class_attendance,
    count_window_days,
    parse_calendar_date,
)
from core.models import AttendanceRecord, SchoolCalendarWindow, Student


def _record(day, present, holiday=False):
    return AttendanceRecord(date=day, class_id="c_p4", present_student_ids=frozenset(present), is_holiday=holiday)


@pytest.fixture
def records():
    return [
        _record("2024-01-08", ["S001"]),
        _record("2024-01-09", ["S001", "S002"]),
        _record("2024-01-10", ["S002", "S003"]),
    ]


@pytest.fixture
def window():
    return SchoolCalendarWindow(school_reopen_date="2024-01-08", vacation_date="2024-01-10")


class TestComputeAttendance:
    """Tests for compute_attendance."""

    def test_three_day_window(self, window, records):
        result = compute_attendance(window, records, "S001")
        assert result.total_days == 3
        assert result.present_days == 2
        assert result.absent_days == 1
        assert result.percentage == 67
        assert result.window_valid is True

    def test_window_counts_days_without_records(self, records):
        wide = SchoolCalendarWindow("2024-01-01", "2024-01-31")
        result = compute_attendance(wide, records, "S003")
        assert result.total_days == 31
        assert result.present_days == 1
        assert result.absent_days == 30
        assert result.percentage == 3

    def test_out_of_order_window_falls_back_to_records(self, records):
        reversed_window = SchoolCalendarWindow("2024-01-10", "2024-01-08")
        result = compute_attendance(reversed_window, records, "S001")
        assert result.total_days == len(records)
        assert result.window_valid is False
        assert result.absent_days >= 0

    @pytest.mark.parametrize("reopen, vacation", [
        ("not-a-date", "2024-01-10"),
        ("2024-13-01", "2024-01-10"),
        (None, "2024-01-10"),
        ("2024-01-08", ""),
    ])
    def test_malformed_dates_never_raise(self, reopen, vacation, records):
        result = compute_attendance(SchoolCalendarWindow(reopen, vacation), records, "S002")
        assert result.window_valid is False
        assert result.total_days == 3
        assert result.present_days == 2

    def test_missing_window(self, records):
        result = compute_attendance(None, records, "S001")
        assert result.total_days == 3
        assert result.window_valid is False

    def test_no_records_and_no_window(self):
        result = compute_attendance(None, [], "S001")
        assert (result.total_days, result.present_days, result.absent_days, result.percentage) == (0, 0, 0, 0)

    def test_absent_days_never_negative(self):
        # Presence outside the window still counts, so present can exceed total.
        one_day = SchoolCalendarWindow("2024-01-08", "2024-01-08")
        records = [_record("2024-01-08", ["S001"]), _record("2024-01-09", ["S001"])]
        result = compute_attendance(one_day, records, "S001")
        assert result.absent_days == 0

    def test_holiday_records_are_ignored(self, records):
        records = records + [_record("2024-01-11", ["S001"], holiday=True)]
        result = compute_attendance(None, records, "S001")
        assert result.total_days == 3
        assert result.present_days == 2

    def test_configured_holiday_dates_are_ignored(self, records):
        result = compute_attendance(None, records, "S001", holiday_dates=["2024-01-08"])
        assert result.total_days == 2
        assert result.present_days == 1

    def test_duplicate_dates_are_merged(self):
        records = [_record("2024-01-08", ["S001"]), _record("2024-01-08", ["S002"])]
        result = compute_attendance(None, records, "S002")
        assert result.total_days == 1
        assert result.present_days == 1
        assert result.percentage == 100

    def test_to_dict(self, window, records):
        data = compute_attendance(window, records, "S001").to_dict()
        assert data["percentage"] == 67
        assert data["window_valid"] is True


class TestDateHelpers:
    """Tests for date parsing and window counting."""

    def test_parse_iso_date(self):
        assert parse_calendar_date("2024-01-08") == date(2024, 1, 8)

    def test_parse_ignores_time_part(self):
        assert parse_calendar_date("2024-01-08T00:00:00") == date(2024, 1, 8)

    def test_parse_bad_value(self):
        assert parse_calendar_date("08/01/2024") is None
        assert parse_calendar_date(12345) is None

    def test_single_day_window(self):
        assert count_window_days(SchoolCalendarWindow("2024-02-29", "2024-02-29")) == 1

    def test_leap_year_window(self):
        assert count_window_days(SchoolCalendarWindow("2024-02-01", "2024-03-01")) == 30


class TestComputeClassAttendance:
    """Tests for the class attendance table."""

    def test_sorted_by_name(self, window, records):
        students = [Student("S002", "Kofi"), Student("S001", "Ama"), Student("S003", "Esi")]
        rows = compute_class_attendance(window, records, students)
        assert [r["name"] for r in rows] == ["Ama", "Esi", "Kofi"]

    def test_row_values(self, window, records):
        rows = compute_class_attendance(window, records, [Student("S003", "Esi")])
        assert rows[0]["present_days"] == 1
        assert rows[0]["total_days"] == 3
        assert rows[0]["percentage"] == 33
