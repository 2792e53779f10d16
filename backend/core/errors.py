"""
errors.py — Exceptions raised by the report engine.

Malformed input (bad term strings, bad calendar dates) never raises; it is
resolved with a fallback and reported through snapshot warnings. Only caller
contract violations end up here.
"""


class ReportError(Exception):
    """Base class for report engine errors."""


class StudentNotFoundError(ReportError, LookupError):
    """The target student is not part of the supplied class roster."""

    def __init__(self, student_id: str, class_id: str = ""):
        self.student_id = student_id
        self.class_id = class_id
        where = f" in class '{class_id}'" if class_id else ""
        super().__init__(f"Student '{student_id}' not found{where}.")
