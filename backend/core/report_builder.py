"""
report_builder.py — Report card assembly.

Builds:
- Student report snapshot (subjects, attendance, position, skills, remarks)
- Class broadsheet        (per-subject totals, average, grade, position per student)

Everything here is pure: the caller fetches the records, this module only
computes. A snapshot is a frozen dataclass tree, so building the same
request twice gives equal snapshots.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from core.app_logger import get_logger
from core.attendance import AttendanceSummary, compute_attendance
from core.errors import StudentNotFoundError
from core.grading import compute_grade, compute_total, format_one_decimal
from core.models import (
    AssessmentEntry,
    AttendanceRecord,
    Remark,
    SchoolConfig,
    SkillsRating,
    Student,
)
from core.ranking import (
    aggregate_scores,
    best_entries_by_subject,
    filter_entries,
    rank_all,
    rank_students,
    subject_positions,
)
from core.terms import resolve_academic_year, resolve_term

logger = get_logger("reports")

DEFAULT_HEAD_TEACHER_REMARK = "An outstanding performance. The school is proud of you."
PLACEHOLDER = "N/A"
PROMOTED_LABEL = "Promoted"
PROMOTION_TERM = 3

RANKING_MODE_CLASS = "class"
RANKING_MODE_SUBJECT = "subject"
RANKING_MODES = (RANKING_MODE_CLASS, RANKING_MODE_SUBJECT)

WARNING_TERM_DEFAULTED = "term_defaulted"
WARNING_ATTENDANCE_WINDOW = "attendance_window_invalid"


# ── Snapshot ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StudentInfo:
    student_id: str
    name: str
    class_id: str
    gender: str


@dataclass(frozen=True)
class SubjectRow:
    subject: str
    test_score: float
    homework_score: float
    project_score: float
    exam_score: float
    total: float
    grade: str
    remark: str
    # Only set in subject ranking mode.
    position: Optional[str] = None


@dataclass(frozen=True)
class ReportSummary:
    total_score: float
    average_score: str
    overall_grade: str
    class_position: str
    rank: int
    total_students: int


@dataclass(frozen=True)
class RemarksBlock:
    teacher: str
    head_teacher: str
    admin_remark: str = ""
    admin_remark_date: str = ""


@dataclass(frozen=True)
class TermDates:
    end_date: str = ""
    reopening_date: str = ""
    vacation_date: str = ""


@dataclass(frozen=True)
class ReportSnapshot:
    student: StudentInfo
    term: int
    term_label: str
    academic_year: str
    attendance: AttendanceSummary
    subjects: Tuple[SubjectRow, ...]
    summary: ReportSummary
    skills: SkillsRating
    remarks: RemarksBlock
    promotion_status: str
    term_dates: TermDates
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["subjects"] = list(data["subjects"])
        data["warnings"] = list(data["warnings"])
        return data


@dataclass(frozen=True)
class ReportRequest:
    """Everything needed to build one student's report."""

    student_id: str
    students: Sequence[Student]
    assessments: Sequence[AssessmentEntry]
    attendance: Sequence[AttendanceRecord] = ()
    config: SchoolConfig = field(default_factory=SchoolConfig)
    teacher_remark: Optional[Remark] = None
    admin_remark: Optional[Remark] = None
    skills: Optional[SkillsRating] = None
    ranking_mode: str = RANKING_MODE_CLASS
    class_id: str = ""
    default_head_teacher_remark: str = DEFAULT_HEAD_TEACHER_REMARK


# ── Helpers ─────────────────────────────────────────────────────────

def _roster_ids(students: Sequence[Student]) -> List[str]:
    """Student ids in roster order, duplicates dropped."""
    return list(dict.fromkeys(s.student_id for s in students if s.student_id))


def _subject_row(entry: AssessmentEntry, position: Optional[str] = None) -> SubjectRow:
    total = compute_total(entry)
    graded = compute_grade(total)
    return SubjectRow(
        subject=entry.subject,
        test_score=entry.test_score,
        homework_score=entry.homework_score,
        project_score=entry.project_score,
        exam_score=entry.exam_score,
        total=total,
        grade=graded["grade"],
        remark=graded["remark"],
        position=position,
    )


def _average(total_score: float, subject_count: int) -> Tuple[str, float]:
    """Return (display average, numeric average); 0 subjects → ("0.0", 0)."""
    if subject_count == 0:
        return "0.0", 0.0
    mean = total_score / subject_count
    return format_one_decimal(mean), mean


def _head_teacher_remark(admin: Optional[Remark], config: SchoolConfig, default: str) -> str:
    if admin is not None and admin.text:
        return admin.text
    return config.head_teacher_remark or default


def promotion_status(term: int) -> str:
    """Flat rule: only third-term reports carry a promotion label."""
    return PROMOTED_LABEL if term == PROMOTION_TERM else PLACEHOLDER


# ── Student Report ──────────────────────────────────────────────────

def build_report(request: ReportRequest) -> ReportSnapshot:
    """
    Assemble the report snapshot for ``request.student_id``.

    Raises ``StudentNotFoundError`` when the student is not in
    ``request.students``. Missing assessments, skills or remarks never raise;
    they show up as zeros and placeholders.
    """
    student = next((s for s in request.students if s.student_id == request.student_id), None)
    if student is None:
        raise StudentNotFoundError(request.student_id, request.class_id)

    warnings: List[str] = []
    config = request.config

    resolution = resolve_term(config.current_term)
    if resolution.should_warn:
        warnings.append(WARNING_TERM_DEFAULTED)
    term = resolution.term
    academic_year = resolve_academic_year(config.academic_year)

    class_id = request.class_id or student.class_id
    roster = _roster_ids(request.students)
    term_entries = filter_entries(
        request.assessments, term=term, academic_year=academic_year, class_id=class_id or None
    )

    attendance = compute_attendance(
        config.calendar_window,
        request.attendance,
        student.student_id,
        holiday_dates=config.holiday_dates,
    )
    if not attendance.window_valid:
        warnings.append(WARNING_ATTENDANCE_WINDOW)

    class_rank = rank_students(aggregate_scores(roster, term_entries), student.student_id)

    own_entries = best_entries_by_subject(e for e in term_entries if e.student_id == student.student_id)
    positions = {}
    if request.ranking_mode == RANKING_MODE_SUBJECT:
        positions = subject_positions(roster, term_entries, student.student_id, own_entries.keys())
    subject_rows = tuple(
        _subject_row(entry, positions[subj].position if subj in positions else None)
        for subj, entry in own_entries.items()
    )

    total_score = sum(row.total for row in subject_rows)
    average_display, average_value = _average(total_score, len(subject_rows))
    summary = ReportSummary(
        total_score=total_score,
        average_score=average_display,
        overall_grade=compute_grade(average_value)["grade"],
        class_position=class_rank.position,
        rank=class_rank.rank,
        total_students=len(roster),
    )

    teacher = request.teacher_remark
    admin = request.admin_remark
    remarks = RemarksBlock(
        teacher=(teacher.text if teacher is not None and teacher.text else PLACEHOLDER),
        head_teacher=_head_teacher_remark(admin, config, request.default_head_teacher_remark),
        admin_remark=admin.text if admin is not None else "",
        admin_remark_date=admin.date_created if admin is not None else "",
    )

    logger.debug(
        "Built report for %s: term %d, %d subjects, position %s",
        student.student_id, term, len(subject_rows), summary.class_position or "-",
    )

    return ReportSnapshot(
        student=StudentInfo(
            student_id=student.student_id,
            name=student.name,
            class_id=class_id,
            gender=student.gender,
        ),
        term=term,
        term_label=resolution.label,
        academic_year=academic_year,
        attendance=attendance,
        subjects=subject_rows,
        summary=summary,
        skills=request.skills or SkillsRating(),
        remarks=remarks,
        promotion_status=promotion_status(term),
        term_dates=TermDates(
            end_date=config.term_end_date,
            reopening_date=config.next_term_begins,
            vacation_date=str(config.vacation_date or ""),
        ),
        warnings=tuple(warnings),
    )


# ── Class Broadsheet ────────────────────────────────────────────────

def _cell(value: Any) -> Optional[float]:
    """Convert a pivot cell to a JSON-safe number, NaN → None."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if np.isnan(v):
        return None
    return int(v) if v.is_integer() else v


def build_class_broadsheet(
    students: Sequence[Student],
    assessments: Sequence[AssessmentEntry],
    config: SchoolConfig,
    class_id: str = "",
    remarks: Optional[Iterable[Remark]] = None,
) -> Dict[str, Any]:
    """
    Whole-class results table, one row per student ordered by position.

    Returns ``{"term", "academic_year", "subjects", "rows", "warnings"}``.
    Subject cells are ``None`` where a student has no entry. Each row shows
    the student's first remark for the current term.
    """
    resolution = resolve_term(config.current_term)
    remark_texts: Dict[str, str] = {}
    for remark in remarks or ():
        if remark.text and remark.applies_to(resolution.term):
            remark_texts.setdefault(remark.student_id, remark.text)
    academic_year = resolve_academic_year(config.academic_year)
    roster = _roster_ids(students)
    names = {s.student_id: s.name for s in students}

    term_entries = filter_entries(
        assessments, term=resolution.term, academic_year=academic_year, class_id=class_id or None
    )

    records = []
    for sid in roster:
        best = best_entries_by_subject(e for e in term_entries if e.student_id == sid)
        for subj, entry in best.items():
            records.append({"student_id": sid, "subject": subj, "total": float(compute_total(entry))})

    subjects = list(dict.fromkeys(r["subject"] for r in records))
    if records:
        long_df = pd.DataFrame(records)
        wide = long_df.pivot(index="student_id", columns="subject", values="total")
        wide = wide.reindex(index=roster, columns=subjects)
    else:
        wide = pd.DataFrame(index=pd.Index(roster, dtype=object), dtype=float)

    totals = wide.sum(axis=1)
    counts = wide.notna().sum(axis=1)
    ranks = rank_all(aggregate_scores(roster, term_entries))

    rows = []
    for sid in roster:
        total_score = _cell(totals.get(sid, 0.0)) or 0
        count = int(counts.get(sid, 0))
        average_display, average_value = _average(total_score, count)
        rank = ranks[sid]
        rows.append({
            "student_id": sid,
            "name": names.get(sid, ""),
            "scores": {subj: _cell(wide.at[sid, subj]) for subj in subjects},
            "subject_count": count,
            "total_score": total_score,
            "average": average_display,
            "overall_grade": compute_grade(average_value)["grade"],
            "rank": rank.rank,
            "position": rank.position,
            "remark": remark_texts.get(sid, PLACEHOLDER),
        })

    rows.sort(key=lambda r: r["rank"])
    return {
        "term": resolution.term,
        "academic_year": academic_year,
        "subjects": subjects,
        "rows": rows,
        "warnings": [WARNING_TERM_DEFAULTED] if resolution.should_warn else [],
    }
