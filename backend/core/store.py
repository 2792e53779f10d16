"""
store.py — Read side of the school document store.

The engine never talks to the store directly. ``collect_report_request``
does the fetching a report page needs (roster, term assessments,
attendance, config, remarks, skills) and hands back a ``ReportRequest``.

``InMemoryDocumentStore`` is a plain dict-of-dicts with the same
get/filter/set surface as the hosted store; the HTTP routes load request
payloads into it.
"""

from typing import Any, Dict, Iterable, List, Optional

from core.app_logger import get_logger
from core.models import (
    AssessmentEntry,
    AttendanceRecord,
    Remark,
    SchoolConfig,
    SkillsRating,
    Student,
)
from core.report_builder import DEFAULT_HEAD_TEACHER_REMARK, RANKING_MODE_CLASS, ReportRequest
from core.terms import resolve_academic_year, resolve_term

logger = get_logger("store")

STUDENTS = "students"
ASSESSMENTS = "assessments"
ATTENDANCE = "attendance"
STUDENT_REMARKS = "student_remarks"
ADMIN_REMARKS = "admin_remarks"
STUDENT_SKILLS = "student_skills"
SETTINGS = "settings"
SCHOOL_CONFIG_KEY = "school_config"


def admin_remark_key(student_id: str, term: int, academic_year: str) -> str:
    """Document id admin remarks are stored under."""
    return f"{student_id}_term{term}_{academic_year}"


class InMemoryDocumentStore:
    """Collections of documents keyed by id."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def set(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[str(key)] = dict(document)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        document = self._collections.get(collection, {}).get(str(key))
        return dict(document) if document is not None else None

    def filter(self, collection: str, **criteria: Any) -> List[Dict[str, Any]]:
        """Documents whose fields equal every ``criteria`` value, in insertion order."""
        matches = []
        for document in self._collections.get(collection, {}).values():
            if all(document.get(k) == v for k, v in criteria.items()):
                matches.append(dict(document))
        return matches

    def load(self, collection: str, documents: Iterable[Dict[str, Any]], key_field: str = "id") -> int:
        """Bulk-insert documents; ones without ``key_field`` get their list index as id."""
        count = 0
        for index, document in enumerate(documents or []):
            if not isinstance(document, dict):
                continue
            key = document.get(key_field)
            self.set(collection, key if key not in (None, "") else f"{collection}-{index}", document)
            count += 1
        return count


def _in_class(documents: List[Dict[str, Any]], class_id: str) -> List[Dict[str, Any]]:
    return [d for d in documents if str(d.get("classId", d.get("class_id", ""))) == class_id]


def _first_for_student(documents: List[Dict[str, Any]], student_id: str) -> Optional[Dict[str, Any]]:
    return next((d for d in documents if str(d.get("studentId", d.get("student_id", ""))) == student_id), None)


def collect_report_request(
    store: InMemoryDocumentStore,
    class_id: str,
    student_id: str,
    ranking_mode: str = RANKING_MODE_CLASS,
    default_head_teacher_remark: str = DEFAULT_HEAD_TEACHER_REMARK,
) -> ReportRequest:
    """Fetch everything one student's report needs from ``store``."""
    config = SchoolConfig.from_dict(store.get(SETTINGS, SCHOOL_CONFIG_KEY))
    term = resolve_term(config.current_term).term
    academic_year = resolve_academic_year(config.academic_year)

    students = [Student.from_dict(d) for d in _in_class(store.filter(STUDENTS), class_id)]
    assessments = [AssessmentEntry.from_dict(d) for d in _in_class(store.filter(ASSESSMENTS), class_id)]
    attendance = [AttendanceRecord.from_dict(d) for d in _in_class(store.filter(ATTENDANCE), class_id)]

    remarks = [Remark.from_dict(d) for d in _in_class(store.filter(STUDENT_REMARKS), class_id)]
    teacher_remark = next((r for r in remarks if r.student_id == student_id and r.applies_to(term)), None)
    skills_doc = _first_for_student(_in_class(store.filter(STUDENT_SKILLS), class_id), student_id)
    admin_doc = store.get(ADMIN_REMARKS, admin_remark_key(student_id, term, academic_year))

    logger.debug(
        "Collected class %s: %d students, %d assessments, %d attendance records",
        class_id, len(students), len(assessments), len(attendance),
    )

    return ReportRequest(
        student_id=student_id,
        students=students,
        assessments=assessments,
        attendance=attendance,
        config=config,
        teacher_remark=teacher_remark,
        admin_remark=Remark.from_dict(admin_doc) if admin_doc else None,
        skills=SkillsRating.from_dict(skills_doc),
        ranking_mode=ranking_mode,
        class_id=class_id,
        default_head_teacher_remark=default_head_teacher_remark,
    )
