"""
ranking.py — Class and subject positions.

Students are ordered by aggregate score, highest first, with a stable sort.
Equal scores are not ties: they keep their input order and take
consecutive positions (90, 90, 70 → 1st, 2nd, 3rd).

The ordinal table only knows 1st/2nd/3rd; every other rank is "th",
so 21 → "21th".
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from core.app_logger import get_logger
from core.grading import compute_total
from core.models import AssessmentEntry, RankedStudentScore

logger = get_logger("ranking")

ORDINAL_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


@dataclass(frozen=True)
class RankResult:
    rank: int
    ordinal_suffix: str

    @property
    def found(self) -> bool:
        return self.rank > 0

    @property
    def position(self) -> str:
        """Display form, e.g. ``"2nd"``; empty when the student was not ranked."""
        return f"{self.rank}{self.ordinal_suffix}" if self.found else ""


def ordinal_suffix(rank: int) -> str:
    return ORDINAL_SUFFIXES.get(rank, "th")


def sort_by_score(scores: Iterable[RankedStudentScore]) -> List[RankedStudentScore]:
    """Highest aggregate first; equal scores keep their input order."""
    return sorted(scores, key=lambda s: s.aggregate_score, reverse=True)


def rank_students(scores: Sequence[RankedStudentScore], target_student_id: str) -> RankResult:
    """
    Return the 1-based position of ``target_student_id``.

    A student missing from ``scores`` gets ``rank=0`` and an empty suffix;
    the caller decides what to show.
    """
    for index, score in enumerate(sort_by_score(scores)):
        if score.student_id == target_student_id:
            rank = index + 1
            return RankResult(rank=rank, ordinal_suffix=ordinal_suffix(rank))
    logger.debug("Student %r not in ranking pool of %d", target_student_id, len(scores))
    return RankResult(rank=0, ordinal_suffix="")


def rank_all(scores: Sequence[RankedStudentScore]) -> Dict[str, RankResult]:
    """Positions for every student in one pass."""
    results = {}
    for index, score in enumerate(sort_by_score(scores)):
        rank = index + 1
        # First occurrence wins if a student id appears twice.
        results.setdefault(score.student_id, RankResult(rank=rank, ordinal_suffix=ordinal_suffix(rank)))
    return results


# ── Aggregation ─────────────────────────────────────────────────────

def best_entries_by_subject(entries: Iterable[AssessmentEntry]) -> Dict[str, AssessmentEntry]:
    """
    One entry per subject: the one with the highest computed total.

    On equal totals the later entry wins. Entries without a subject are
    dropped. Subject order follows first appearance.
    """
    best: Dict[str, AssessmentEntry] = {}
    for entry in entries:
        if not entry.subject:
            continue
        current = best.get(entry.subject)
        if current is None or compute_total(entry) >= compute_total(current):
            best[entry.subject] = entry
    return best


def filter_entries(
    entries: Iterable[AssessmentEntry],
    term: int,
    academic_year: str = "",
    class_id: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[AssessmentEntry]:
    """Entries for one term (and optionally class/subject/year)."""
    selected = []
    for entry in entries:
        if entry.term != term:
            continue
        if academic_year and entry.academic_year and entry.academic_year != academic_year:
            continue
        if class_id and entry.class_id and entry.class_id != class_id:
            continue
        if subject is not None and entry.subject != subject:
            continue
        selected.append(entry)
    return selected


def aggregate_scores(
    student_ids: Sequence[str],
    entries: Iterable[AssessmentEntry],
    subject: Optional[str] = None,
) -> List[RankedStudentScore]:
    """
    Aggregate score per student, in roster order.

    Whole-class mode sums each student's best total per subject; subject
    mode uses that subject's total alone. Students without entries score 0
    so they still take a position.
    """
    by_student: Dict[str, List[AssessmentEntry]] = {}
    for entry in entries:
        if subject is not None and entry.subject != subject:
            continue
        by_student.setdefault(entry.student_id, []).append(entry)

    scores = []
    for student_id in student_ids:
        best = best_entries_by_subject(by_student.get(student_id, []))
        aggregate = sum(compute_total(e) for e in best.values())
        scores.append(RankedStudentScore(student_id=student_id, aggregate_score=aggregate))
    return scores


def subject_positions(
    student_ids: Sequence[str],
    entries: Sequence[AssessmentEntry],
    target_student_id: str,
    subjects: Iterable[str],
) -> Dict[str, RankResult]:
    """Position of the target student in each of ``subjects``."""
    positions = {}
    for subj in subjects:
        # Only students who sat the subject are ranked in it.
        takers = [sid for sid in student_ids if any(e.student_id == sid and e.subject == subj for e in entries)]
        positions[subj] = rank_students(aggregate_scores(takers, entries, subject=subj), target_student_id)
    return positions
