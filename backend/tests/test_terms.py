"""
Tests for core/terms.py — term resolution from configuration strings.
"""

import os
import sys
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.terms import resolve_academic_year, resolve_term


class TestResolveTerm:
    """Tests for resolve_term."""

    @pytest.mark.parametrize("raw, expected", [
        ("Term 2", 2),
        ("3", 3),
        ("1", 1),
        ("Term 1", 1),
        (" 2 ", 2),
        ("term   3", 3),
        ("2nd Term", 2),
        ("Term 2, 2024", 2),
        ("3rd", 3),
        ("Term +3", 3),
    ])
    def test_valid_values(self, raw, expected):
        result = resolve_term(raw)
        assert result.term == expected
        assert result.was_defaulted is False
        assert result.should_warn is False

    @pytest.mark.parametrize("raw", ["Term 5", "", "Third", "0", "Term", "Term two", "4th Term", "Term -2", "2023 Term"])
    def test_malformed_values_default_to_term_one(self, raw):
        result = resolve_term(raw)
        assert result.term == 1
        assert result.was_defaulted is True
        assert result.should_warn is True

    def test_none_defaults(self):
        result = resolve_term(None)
        assert result.term == 1
        assert result.was_defaulted is True

    def test_label(self):
        assert resolve_term("2").label == "Term 2"

    def test_keeps_raw_value(self):
        assert resolve_term(" Term 5 ").raw == "Term 5"


class TestResolveAcademicYear:
    """Academic year is passed through untouched apart from whitespace."""

    def test_trims(self):
        assert resolve_academic_year(" 2023-2024 ") == "2023-2024"

    def test_none(self):
        assert resolve_academic_year(None) == ""

    def test_no_validation(self):
        assert resolve_academic_year("whenever") == "whenever"
