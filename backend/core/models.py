"""
models.py — Typed records consumed and produced by the report engine.

Documents arrive from the store as loose dicts (camelCase keys, optional
fields, numbers stored as strings). Each record has a ``from_dict`` that
accepts either camelCase or snake_case keys and coerces values, so nothing
downstream has to deal with raw documents.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple


# ── Helpers ─────────────────────────────────────────────────────────

def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


# ── Roster ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Student:
    student_id: str
    name: str = ""
    class_id: str = ""
    gender: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Student":
        return cls(
            student_id=_to_str(_pick(data, "studentId", "student_id", "id")),
            name=_to_str(_pick(data, "name", "fullName", "full_name")),
            class_id=_to_str(_pick(data, "classId", "class_id")),
            gender=_to_str(_pick(data, "gender")),
        )


# ── Gradebook ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class AssessmentEntry:
    """One student, one subject, one term, one academic year."""

    student_id: str
    subject: str
    term: int
    class_id: str = ""
    academic_year: str = ""
    test_score: float = 0.0
    homework_score: float = 0.0
    project_score: float = 0.0
    exam_score: float = 0.0
    # Cached by the gradebook; advisory only.
    total: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentEntry":
        return cls(
            student_id=_to_str(_pick(data, "studentId", "student_id")),
            subject=_to_str(_pick(data, "subject")),
            term=_to_int(_pick(data, "term")),
            class_id=_to_str(_pick(data, "classId", "class_id")),
            academic_year=_to_str(_pick(data, "academicYear", "academic_year")),
            test_score=_to_float(_pick(data, "testScore", "test_score")),
            homework_score=_to_float(_pick(data, "homeworkScore", "homework_score")),
            project_score=_to_float(_pick(data, "projectScore", "project_score")),
            exam_score=_to_float(_pick(data, "examScore", "exam_score")),
            total=_to_optional_float(_pick(data, "total")),
        )


@dataclass(frozen=True)
class RankedStudentScore:
    student_id: str
    aggregate_score: float


# ── Attendance ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AttendanceRecord:
    """Presence for one class on one calendar date (``YYYY-MM-DD``)."""

    date: str
    class_id: str = ""
    present_student_ids: FrozenSet[str] = frozenset()
    is_holiday: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceRecord":
        present = _pick(data, "presentStudentIds", "present_student_ids", default=[])
        if isinstance(present, str):
            present = [present]
        return cls(
            date=_to_str(_pick(data, "date")),
            class_id=_to_str(_pick(data, "classId", "class_id")),
            present_student_ids=frozenset(_to_str(s) for s in present),
            is_holiday=_to_bool(_pick(data, "isHoliday", "is_holiday", default=False)),
        )


@dataclass(frozen=True)
class SchoolCalendarWindow:
    """Raw reopen/vacation strings; validated by ``core.attendance``."""

    school_reopen_date: Optional[str] = None
    vacation_date: Optional[str] = None


# ── Remarks & skills ────────────────────────────────────────────────

@dataclass(frozen=True)
class Remark:
    student_id: str
    text: str = ""
    date_created: str = ""
    # None for documents written before remarks were kept per term.
    term: Optional[int] = None

    def applies_to(self, term: int) -> bool:
        return self.term is None or self.term == term

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Remark":
        return cls(
            student_id=_to_str(_pick(data, "studentId", "student_id")),
            text=_to_str(_pick(data, "remark", "text")),
            date_created=_to_str(_pick(data, "dateCreated", "date_created")),
            term=_to_int(_pick(data, "term"), default=None),
        )


SKILL_FIELDS = (
    "punctuality",
    "neatness",
    "conduct",
    "attitude_to_work",
    "class_participation",
    "homework_completion",
)
SKILL_PLACEHOLDER = "N/A"


@dataclass(frozen=True)
class SkillsRating:
    punctuality: str = SKILL_PLACEHOLDER
    neatness: str = SKILL_PLACEHOLDER
    conduct: str = SKILL_PLACEHOLDER
    attitude_to_work: str = SKILL_PLACEHOLDER
    class_participation: str = SKILL_PLACEHOLDER
    homework_completion: str = SKILL_PLACEHOLDER

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SkillsRating":
        if not data:
            return cls()
        camel = {
            "attitude_to_work": "attitudeToWork",
            "class_participation": "classParticipation",
            "homework_completion": "homeworkCompletion",
        }
        values = {}
        for name in SKILL_FIELDS:
            raw = _to_str(_pick(data, camel.get(name, name), name))
            values[name] = raw or SKILL_PLACEHOLDER
        return cls(**values)


# ── School configuration ────────────────────────────────────────────

def parse_holiday_dates(value: Any) -> Tuple[str, ...]:
    """
    Holiday dates stored either as plain date strings or as
    ``{"date": ..., "name": ...}`` documents. A bare string is one date.
    """
    if not value:
        return ()
    if isinstance(value, (str, dict)):
        value = [value]
    dates = []
    for h in value:
        date = _to_str(h.get("date") if isinstance(h, dict) else h)
        if date:
            dates.append(date)
    return tuple(dates)


@dataclass(frozen=True)
class SchoolConfig:
    """
    Explicit school configuration.

    ``current_term`` and the date fields stay raw here; they are only ever
    read through ``core.terms.resolve_term`` and ``core.attendance``.
    """

    current_term: str = ""
    academic_year: str = ""
    school_reopen_date: Optional[str] = None
    vacation_date: Optional[str] = None
    term_end_date: str = ""
    next_term_begins: str = ""
    head_teacher_remark: str = ""
    school_name: str = ""
    holiday_dates: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def calendar_window(self) -> SchoolCalendarWindow:
        return SchoolCalendarWindow(self.school_reopen_date, self.vacation_date)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SchoolConfig":
        data = data or {}
        return cls(
            current_term=_to_str(_pick(data, "currentTerm", "current_term")),
            academic_year=_to_str(_pick(data, "academicYear", "academic_year")),
            school_reopen_date=_pick(data, "schoolReopenDate", "school_reopen_date"),
            vacation_date=_pick(data, "vacationDate", "vacation_date"),
            term_end_date=_to_str(_pick(data, "termEndDate", "term_end_date")),
            next_term_begins=_to_str(_pick(data, "nextTermBegins", "next_term_begins")),
            head_teacher_remark=_to_str(_pick(data, "headTeacherRemark", "head_teacher_remark")),
            school_name=_to_str(_pick(data, "schoolName", "school_name")),
            holiday_dates=parse_holiday_dates(_pick(data, "holidayDates", "holiday_dates")),
        )
