"""
Analyze routes — partial computations (grades, terms, attendance, positions).
"""

from fastapi import APIRouter, HTTPException

from core.attendance import compute_attendance, compute_class_attendance
from core.grading import compute_grade, compute_total, get_all_grade_thresholds
from core.models import (
    AttendanceRecord,
    RankedStudentScore,
    SchoolCalendarWindow,
    Student,
    parse_holiday_dates,
)
from core.ranking import rank_students
from core.terms import resolve_term

router = APIRouter()


def _attendance_inputs(payload: dict):
    window = SchoolCalendarWindow(
        school_reopen_date=payload.get("school_reopen_date"),
        vacation_date=payload.get("vacation_date"),
    )
    records = [AttendanceRecord.from_dict(r) for r in payload.get("records") or [] if isinstance(r, dict)]
    return window, records, parse_holiday_dates(payload.get("holiday_dates"))


@router.post("/grade")
async def grade(payload: dict):
    """Total and letter grade for one set of component scores."""
    if not payload:
        raise HTTPException(400, "No scores provided.")
    scores = {
        "test_score": payload.get("test_score", payload.get("testScore")),
        "homework_score": payload.get("homework_score", payload.get("homeworkScore")),
        "project_score": payload.get("project_score", payload.get("projectScore")),
        "exam_score": payload.get("exam_score", payload.get("examScore")),
    }
    return compute_grade(compute_total(scores))


@router.post("/term")
async def term(payload: dict):
    """Resolve a configured term string."""
    resolution = resolve_term(payload.get("current_term"))
    return {
        "term": resolution.term,
        "label": resolution.label,
        "was_defaulted": resolution.was_defaulted,
        "warning": resolution.should_warn,
    }


@router.post("/attendance")
async def attendance(payload: dict):
    """Attendance block for one student."""
    student_id = payload.get("student_id")
    if not student_id:
        raise HTTPException(400, "Provide 'student_id'.")
    window, records, holidays = _attendance_inputs(payload)
    return compute_attendance(window, records, str(student_id), holiday_dates=holidays).to_dict()


@router.post("/attendance/class")
async def class_attendance(payload: dict):
    """Attendance rows for every student in a class."""
    students = payload.get("students")
    if not students:
        raise HTTPException(400, "No students provided.")
    window, records, holidays = _attendance_inputs(payload)
    roster = [Student.from_dict(s) for s in students if isinstance(s, dict)]
    return {"students": compute_class_attendance(window, records, roster, holiday_dates=holidays)}


@router.post("/ranking")
async def ranking(payload: dict):
    """
    Position of one student among pre-aggregated scores.
    Expects: { "student_id", "scores": [{"student_id", "aggregate_score"}, ...] }
    """
    student_id = payload.get("student_id")
    scores = payload.get("scores")
    if not student_id or not scores:
        raise HTTPException(400, "Provide 'student_id' and 'scores'.")

    pool = []
    for s in scores:
        if not isinstance(s, dict):
            continue
        try:
            value = float(s.get("aggregate_score", s.get("aggregateScore", 0)) or 0)
        except (TypeError, ValueError):
            value = 0.0
        pool.append(RankedStudentScore(
            student_id=str(s.get("student_id", s.get("studentId", ""))),
            aggregate_score=value,
        ))

    result = rank_students(pool, str(student_id))
    if not result.found:
        raise HTTPException(404, f"Student '{student_id}' not found.")
    return {"rank": result.rank, "ordinal_suffix": result.ordinal_suffix, "position": result.position}


@router.get("/grade-scale")
async def grade_scale():
    """Return the grade bands for legends."""
    return {"grade_scale": get_all_grade_thresholds()}
