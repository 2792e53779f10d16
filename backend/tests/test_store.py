"""
Tests for core/store.py — in-memory store and report request collection.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.report_builder import build_report
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


@pytest.fixture
def store():
    s = InMemoryDocumentStore()
    s.set(SETTINGS, SCHOOL_CONFIG_KEY, {
        "currentTerm": "Term 2",
        "academicYear": "2023-2024",
        "schoolReopenDate": "2024-01-08",
        "vacationDate": "2024-01-10",
        "headTeacherRemark": "Good effort this term.",
    })
    s.load(STUDENTS, [
        {"id": "S001", "name": "Ama Mensah", "classId": "c_p4", "gender": "Female"},
        {"id": "S002", "name": "Kofi Boateng", "classId": "c_p4", "gender": "Male"},
        {"id": "S100", "name": "Other Class", "classId": "c_p5", "gender": "Male"},
    ])
    s.load(ASSESSMENTS, [
        {"id": "a1", "studentId": "S001", "classId": "c_p4", "subject": "Mathematics", "term": 2,
         "academicYear": "2023-2024", "testScore": 15, "homeworkScore": 15, "projectScore": 20, "examScore": 60},
        {"id": "a2", "studentId": "S002", "classId": "c_p4", "subject": "Mathematics", "term": 2,
         "academicYear": "2023-2024", "testScore": 15, "homeworkScore": 15, "projectScore": 20, "examScore": 100},
        {"id": "a3", "studentId": "S100", "classId": "c_p5", "subject": "Mathematics", "term": 2,
         "academicYear": "2023-2024", "testScore": 15, "homeworkScore": 15, "projectScore": 20, "examScore": 100},
    ])
    s.load(ATTENDANCE, [
        {"id": "c_p4_2024-01-08", "date": "2024-01-08", "classId": "c_p4", "presentStudentIds": ["S001"]},
        {"id": "c_p4_2024-01-09", "date": "2024-01-09", "classId": "c_p4", "presentStudentIds": ["S002"]},
    ])
    s.load(STUDENT_REMARKS, [{"id": "r1", "studentId": "S001", "classId": "c_p4", "remark": "Neat work."}])
    s.load(STUDENT_SKILLS, [{"id": "k1", "studentId": "S001", "classId": "c_p4", "conduct": "Excellent"}])
    return s


class TestInMemoryDocumentStore:
    """Tests for the store surface."""

    def test_get_returns_copy(self, store):
        doc = store.get(STUDENTS, "S001")
        doc["name"] = "changed"
        assert store.get(STUDENTS, "S001")["name"] == "Ama Mensah"

    def test_get_missing(self, store):
        assert store.get(STUDENTS, "nope") is None

    def test_filter(self, store):
        assert [d["id"] for d in store.filter(STUDENTS, classId="c_p4")] == ["S001", "S002"]

    def test_load_without_ids(self):
        s = InMemoryDocumentStore()
        assert s.load("things", [{"a": 1}, {"a": 2}, "junk"]) == 2
        assert len(s.filter("things")) == 2


class TestCollectReportRequest:
    """Tests for collect_report_request."""

    def test_scopes_to_class(self, store):
        request = collect_report_request(store, "c_p4", "S001")
        assert [s.student_id for s in request.students] == ["S001", "S002"]
        assert all(a.class_id == "c_p4" for a in request.assessments)
        assert len(request.attendance) == 2

    def test_remarks_and_skills(self, store):
        request = collect_report_request(store, "c_p4", "S001")
        assert request.teacher_remark.text == "Neat work."
        assert request.skills.conduct == "Excellent"
        assert request.skills.neatness == "N/A"
        assert request.admin_remark is None

    def test_teacher_remark_for_current_term(self, store):
        store.load(STUDENT_REMARKS, [
            {"id": "r2", "studentId": "S002", "classId": "c_p4", "term": 1, "remark": "Term one remark"},
            {"id": "r3", "studentId": "S002", "classId": "c_p4", "term": "2", "remark": "Term two remark"},
        ])
        request = collect_report_request(store, "c_p4", "S002")
        assert request.teacher_remark.text == "Term two remark"
        assert request.teacher_remark.term == 2

    def test_admin_remark_lookup(self, store):
        key = admin_remark_key("S001", 2, "2023-2024")
        assert key == "S001_term2_2023-2024"
        store.set(ADMIN_REMARKS, key, {"studentId": "S001", "remark": "Promising.", "dateCreated": "2024-04-02"})
        request = collect_report_request(store, "c_p4", "S001")
        assert request.admin_remark.text == "Promising."

    def test_end_to_end(self, store):
        snapshot = build_report(collect_report_request(store, "c_p4", "S001"))
        assert snapshot.subjects[0].total == 80
        assert snapshot.summary.class_position == "2nd"
        assert snapshot.summary.total_students == 2
        assert snapshot.remarks.head_teacher == "Good effort this term."
        assert snapshot.attendance.present_days == 1
        assert snapshot.attendance.total_days == 3
