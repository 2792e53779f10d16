"""
terms.py — Term and academic-year resolution.

School configuration stores the current term as free text ("Term 2", "2",
sometimes junk). Every caller goes through ``resolve_term`` instead of
pulling digits out of the string on its own.
"""

import re
from dataclasses import dataclass
from typing import Optional

from core.app_logger import get_logger

logger = get_logger("terms")

VALID_TERMS = (1, 2, 3)
DEFAULT_TERM = 1
# Spellings of term 1 that are canonical, never a configuration mistake.
CANONICAL_TERM_ONE = ("Term 1", "1")
# Optional sign and digits at the start; the rest of the token is ignored.
LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class TermResolution:
    term: int
    was_defaulted: bool
    raw: str = ""

    @property
    def should_warn(self) -> bool:
        """True when the configured value was genuinely malformed."""
        return self.was_defaulted and self.raw not in CANONICAL_TERM_ONE

    @property
    def label(self) -> str:
        return f"Term {self.term}"


def _parse_term_number(text: str) -> Optional[int]:
    match = LEADING_INT_RE.match(text)
    if not match:
        return None
    value = int(match.group(1))
    return value if value in VALID_TERMS else None


def resolve_term(raw_term: Optional[str]) -> TermResolution:
    """
    Resolve a configured term string to 1, 2 or 3.

    Reads the leading integer of the whole string ("2", "2nd Term"), then
    of the second whitespace token ("Term 2", "Term 2, 2024"). Anything
    else defaults to term 1 with ``was_defaulted=True``.
    """
    raw = "" if raw_term is None else str(raw_term).strip()

    term = _parse_term_number(raw)
    if term is not None:
        return TermResolution(term=term, was_defaulted=False, raw=raw)

    parts = raw.split()
    if len(parts) > 1:
        term = _parse_term_number(parts[1])
        if term is not None:
            return TermResolution(term=term, was_defaulted=False, raw=raw)

    resolution = TermResolution(term=DEFAULT_TERM, was_defaulted=True, raw=raw)
    if resolution.should_warn:
        logger.warning("Unrecognised current term %r; defaulting to Term %d", raw, DEFAULT_TERM)
    return resolution


def resolve_academic_year(raw_year: Optional[str]) -> str:
    """Academic year is an opaque grouping key; only whitespace is trimmed."""
    return "" if raw_year is None else str(raw_year).strip()
