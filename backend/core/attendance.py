"""
attendance.py — Attendance statistics over a school calendar window.

Total days come from the reopen → vacation window (every calendar day,
inclusive). When the window is missing, unparseable or out of order the
count falls back to the number of attendance records held for the class.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.app_logger import get_logger
from core.grading import round_half_up
from core.models import AttendanceRecord, SchoolCalendarWindow, Student

logger = get_logger("attendance")

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class AttendanceSummary:
    total_days: int
    present_days: int
    absent_days: int
    percentage: int
    # False when total_days came from the record-count fallback.
    window_valid: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "percentage": self.percentage,
            "window_valid": self.window_valid,
        }


# ── Helpers ─────────────────────────────────────────────────────────

def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` (a trailing time part is ignored). Never raises."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    text = str(value).strip()[:10]
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def window_bounds(window: Optional[SchoolCalendarWindow]) -> Optional[Tuple[date, date]]:
    """Return ``(reopen, vacation)`` for a valid window, else ``None``."""
    if window is None:
        return None
    reopen = parse_calendar_date(window.school_reopen_date)
    vacation = parse_calendar_date(window.vacation_date)
    if reopen is None or vacation is None or reopen > vacation:
        return None
    return reopen, vacation


def count_window_days(window: Optional[SchoolCalendarWindow]) -> Optional[int]:
    """Inclusive calendar-day count of a valid window, else ``None``."""
    bounds = window_bounds(window)
    if bounds is None:
        return None
    reopen, vacation = bounds
    return (vacation - reopen).days + 1


def _school_day_records(
    records: Iterable[AttendanceRecord],
    holiday_dates: Iterable[str] = (),
) -> Dict[str, frozenset]:
    """
    Collapse records to one entry per date, skipping holidays.

    Duplicate records for a date are merged (union of present ids) so a
    date is never counted twice.
    """
    holidays = {str(d).strip() for d in holiday_dates}
    by_date: Dict[str, frozenset] = {}
    for record in records:
        if record.is_holiday or record.date in holidays:
            continue
        by_date[record.date] = by_date.get(record.date, frozenset()) | record.present_student_ids
    return by_date


def _summarise(total_days: int, present_days: int, window_valid: bool) -> AttendanceSummary:
    absent_days = max(0, total_days - present_days)
    percentage = round_half_up(present_days / total_days * 100) if total_days > 0 else 0
    return AttendanceSummary(
        total_days=total_days,
        present_days=present_days,
        absent_days=absent_days,
        percentage=percentage,
        window_valid=window_valid,
    )


# ── Public API ──────────────────────────────────────────────────────

def compute_attendance(
    window: Optional[SchoolCalendarWindow],
    records: Iterable[AttendanceRecord],
    student_id: str,
    holiday_dates: Iterable[str] = (),
) -> AttendanceSummary:
    """Attendance block for one student. Malformed dates never raise."""
    by_date = _school_day_records(records, holiday_dates)

    total_days = count_window_days(window)
    window_valid = total_days is not None
    if not window_valid:
        logger.warning(
            "School calendar window invalid (%r → %r); counting %d attendance records instead",
            getattr(window, "school_reopen_date", None),
            getattr(window, "vacation_date", None),
            len(by_date),
        )
        total_days = len(by_date)

    present_days = sum(1 for present in by_date.values() if student_id in present)
    return _summarise(total_days, present_days, window_valid)


def compute_class_attendance(
    window: Optional[SchoolCalendarWindow],
    records: Iterable[AttendanceRecord],
    students: Iterable[Student],
    holiday_dates: Iterable[str] = (),
) -> List[Dict[str, Any]]:
    """Per-student attendance rows for a whole class, sorted by name."""
    by_date = _school_day_records(records, holiday_dates)
    total_days = count_window_days(window)
    window_valid = total_days is not None
    if not window_valid:
        logger.warning("School calendar window invalid; using %d attendance records", len(by_date))
        total_days = len(by_date)

    rows = []
    for student in students:
        present_days = sum(1 for present in by_date.values() if student.student_id in present)
        summary = _summarise(total_days, present_days, window_valid)
        rows.append({
            "student_id": student.student_id,
            "name": student.name,
            "gender": student.gender,
            **summary.to_dict(),
        })

    rows.sort(key=lambda r: (r["name"].lower(), r["student_id"]))
    return rows
