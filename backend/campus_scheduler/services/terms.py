from __future__ import annotations

from datetime import date


def default_term(today: date) -> tuple[str, int]:
    """Academic year ``YYYY-YYYY`` starting in the calendar year of ``today``; semester 1 for January-June."""
    semester = 1 if today.month < 7 else 2
    return f"{today.year}-{today.year + 1}", semester


def resolve_term(academic_year: str | None, semester: int | None, today: date | None = None) -> tuple[str, int]:
    default_year, default_semester = default_term(today or date.today())
    return academic_year or default_year, semester or default_semester
