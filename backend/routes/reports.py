"""
Report routes — student report snapshots and class broadsheets.
"""

import os
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from core.errors import StudentNotFoundError
from core.models import AssessmentEntry, Remark, SchoolConfig, Student
from core.report_builder import (
    DEFAULT_HEAD_TEACHER_REMARK,
    RANKING_MODES,
    RANKING_MODE_CLASS,
    build_class_broadsheet,
    build_report,
)
from core.store import (
    ADMIN_REMARKS,
    ASSESSMENTS,
    ATTENDANCE,
    SCHOOL_CONFIG_KEY,
    SETTINGS,
    STUDENTS,
    STUDENT_REMARKS,
    STUDENT_SKILLS,
    InMemoryDocumentStore,
    admin_remark_key,
    collect_report_request,
)
from core.terms import resolve_term

router = APIRouter()

HEAD_TEACHER_REMARK = os.getenv("DEFAULT_HEAD_TEACHER_REMARK", DEFAULT_HEAD_TEACHER_REMARK)


def _store_from_payload(payload: Dict[str, Any]) -> InMemoryDocumentStore:
    """Load the collections sent with a request into a throwaway store."""
    store = InMemoryDocumentStore()
    store.set(SETTINGS, SCHOOL_CONFIG_KEY, payload.get("config") or {})
    store.load(STUDENTS, payload.get("students") or [])
    store.load(ASSESSMENTS, payload.get("assessments") or [])
    store.load(ATTENDANCE, payload.get("attendance") or [])
    store.load(STUDENT_REMARKS, payload.get("student_remarks") or [])
    store.load(STUDENT_SKILLS, payload.get("student_skills") or [])

    config = SchoolConfig.from_dict(payload.get("config"))
    for doc in payload.get("admin_remarks") or []:
        if not isinstance(doc, dict):
            continue
        key = doc.get("id")
        if not key:
            # Remarks sent without a term or year belong to the configured ones
            raw_term = doc.get("term")
            if raw_term in (None, ""):
                raw_term = config.current_term
            key = admin_remark_key(
                str(doc.get("studentId", doc.get("student_id", ""))),
                resolve_term(str(raw_term)).term,
                str(doc.get("academicYear") or config.academic_year),
            )
        store.set(ADMIN_REMARKS, key, doc)
    return store


@router.post("/student")
async def student_report(payload: dict):
    """
    Build one student's report card snapshot.
    Expects: { "student_id", "class_id", "config", "students", "assessments",
               "attendance", "student_remarks", "admin_remarks",
               "student_skills", "ranking_mode": "class" | "subject" }
    """
    student_id = payload.get("student_id")
    class_id = payload.get("class_id")
    if not student_id or not class_id:
        raise HTTPException(400, "Provide 'student_id' and 'class_id'.")
    if not payload.get("students"):
        raise HTTPException(400, "No students provided.")

    ranking_mode = payload.get("ranking_mode") or RANKING_MODE_CLASS
    if ranking_mode not in RANKING_MODES:
        raise HTTPException(400, f"Unknown ranking_mode '{ranking_mode}'. Use one of {list(RANKING_MODES)}.")

    store = _store_from_payload(payload)
    request = collect_report_request(
        store,
        class_id=str(class_id),
        student_id=str(student_id),
        ranking_mode=ranking_mode,
        default_head_teacher_remark=HEAD_TEACHER_REMARK,
    )
    try:
        snapshot = build_report(request)
    except StudentNotFoundError as e:
        raise HTTPException(404, str(e))
    return snapshot.to_dict()


@router.post("/class-broadsheet")
async def class_broadsheet(payload: dict):
    """Whole-class results table ordered by position."""
    students = payload.get("students")
    if not students:
        raise HTTPException(400, "No students provided.")

    class_id = str(payload.get("class_id") or "")
    roster = [Student.from_dict(s) for s in students if isinstance(s, dict)]
    if class_id:
        roster = [s for s in roster if not s.class_id or s.class_id == class_id]
    assessments = [AssessmentEntry.from_dict(a) for a in payload.get("assessments") or [] if isinstance(a, dict)]
    remarks = [Remark.from_dict(r) for r in payload.get("student_remarks") or [] if isinstance(r, dict)]

    return build_class_broadsheet(
        roster,
        assessments,
        SchoolConfig.from_dict(payload.get("config")),
        class_id=class_id,
        remarks=remarks,
    )
