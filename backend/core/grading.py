"""
grading.py — Score aggregation and letter-grade bands.

A subject total is built from continuous assessment (test, homework, project)
plus the exam scaled to half its value:

    total = test + homework + project + round_half_up(exam * 0.5)

Every component is clamped to its cap before it is added, so the total
always lands in 0-100.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional


# Component caps (raw marks).
COMPONENT_CAPS = {
    "test_score": 15.0,
    "homework_score": 15.0,
    "project_score": 20.0,
    "exam_score": 100.0,
}
EXAM_WEIGHT = 0.5

# Grade bands (min_total, grade, remark). Ordered high to low.
GRADE_BANDS = [
    (80.0, "A", "Excellent"),
    (70.0, "B", "Very Good"),
    (60.0, "C", "Good"),
    (45.0, "D", "Pass"),
    (0.0, "F", "Fail"),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def format_one_decimal(value: float) -> str:
    """Format with one decimal place, rounding halves up (2.25 -> '2.3')."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _coerce_score(score: Any) -> float:
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def clamp_component(score: Any, cap: float) -> float:
    """Clamp one raw component score to [0, cap]. Junk input counts as 0."""
    return max(0.0, min(cap, _coerce_score(score)))


def compute_total(entry) -> float:
    """
    Compute the 0-100 subject total for an assessment entry.

    ``entry`` may be an ``AssessmentEntry`` or any mapping/object exposing the
    four component fields. Any cached ``total`` on the entry is ignored.
    """
    def component(name: str) -> float:
        if isinstance(entry, dict):
            raw = entry.get(name)
        else:
            raw = getattr(entry, name, None)
        return clamp_component(raw, COMPONENT_CAPS[name])

    ca = component("test_score") + component("homework_score") + component("project_score")
    exam_scaled = round_half_up(component("exam_score") * EXAM_WEIGHT)
    total = ca + exam_scaled
    # Only the exam term is rounded; fractional CA marks pass through.
    return int(total) if float(total).is_integer() else total


def compute_grade(total: Optional[float]) -> Dict[str, Any]:
    """Return ``{"total", "grade", "remark"}`` for a total. Out-of-range input falls to F."""
    value = _coerce_score(total)
    for min_total, grade, remark in GRADE_BANDS:
        if value >= min_total:
            return {"total": total, "grade": grade, "remark": remark}
    return {"total": total, "grade": "F", "remark": "Fail"}


def get_grade_label(total: Optional[float]) -> str:
    """Return just the letter grade."""
    return compute_grade(total)["grade"]


def get_all_grade_thresholds() -> List[Dict[str, Any]]:
    """Return the full grade scale for legend/reference."""
    thresholds = []
    for idx, (min_total, grade, remark) in enumerate(GRADE_BANDS):
        max_total = 100.0 if idx == 0 else GRADE_BANDS[idx - 1][0] - 1
        thresholds.append(
            {
                "min": min_total,
                "max": max_total,
                "grade": grade,
                "remark": remark,
            }
        )
    return thresholds
