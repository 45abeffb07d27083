from datetime import datetime
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.schemas.course import TargetingCriteria
from app.services.course import generate_slug, match_students
from app.services.report import count_by_month, months_ago, truncate


@pytest.mark.parametrize("title,slug", [
    ("Intro to Python", "intro-to-python"),
    ("  C++ & Data Structures!  ", "c-data-structures"),
    ("Already-slugged", "already-slugged"),
    ("***", ""),
])
def test_generate_slug(title, slug):
    assert generate_slug(title) == slug


def _student(sid, year, section, dept):
    return SimpleNamespace(id=sid, year=year, section=section, dept=dept)


STUDENTS = [
    _student(1, "1st Year", "A", "CSE"),
    _student(2, "1st Year", "B", "ECE"),
    _student(3, "2nd Year", "A", "CSE"),
    _student(4, "3rd Year", "C", "ME"),
]


def test_targeting_or_within_category():
    criteria = TargetingCriteria(years=["1st Year", "2nd Year"])
    assert match_students(STUDENTS, criteria) == [1, 2, 3]


def test_targeting_and_across_categories():
    criteria = TargetingCriteria(years=["1st Year"], departments=["CSE"])
    assert match_students(STUDENTS, criteria) == [1]


def test_targeting_empty_category_matches_all():
    criteria = TargetingCriteria(sections=["A"])
    assert match_students(STUDENTS, criteria) == [1, 3]


def test_targeting_rejects_unknown_values():
    with pytest.raises(ValidationError):
        TargetingCriteria(years=["9th Year"])


def test_targeting_deduplicates_and_reports_empty():
    criteria = TargetingCriteria(sections=["A", "A"])
    assert criteria.sections == ["A"]
    assert TargetingCriteria().is_empty()
    assert not criteria.is_empty()


def test_months_ago_crosses_year_boundary():
    assert months_ago(datetime(2026, 3, 31, 12, 0), 6) == datetime(2025, 9, 28, 12, 0)


def test_count_by_month_keeps_first_seen_order():
    dates = [datetime(2026, 1, 5), datetime(2026, 1, 20), datetime(2026, 2, 1), None]
    buckets = count_by_month(dates)
    assert [(b.month, b.count) for b in buckets] == [("Jan 2026", 2), ("Feb 2026", 1)]


def test_truncate():
    assert truncate("Short", 30) == "Short"
    assert truncate("x" * 31, 30) == "x" * 30 + "..."
