from datetime import date

import pytest

from campus_scheduler.core.exceptions import SchedulingValidationError
from campus_scheduler.services.terms import default_term, resolve_term
from campus_scheduler.services.timeslot import (
    TimeSlot,
    format_minutes,
    is_well_formed,
    overlaps,
    parse_time_to_minutes,
    try_parse_minutes,
    validated_slot,
    weekday_name,
)


def slot(day: str, start: str, end: str) -> TimeSlot:
    return TimeSlot.from_strings(day, start, end)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("00:00", 0), ("08:30", 510), ("23:59", 1439)],
)
def test_parse_valid_times(value, expected):
    assert parse_time_to_minutes(value) == expected
    assert format_minutes(expected) == value


@pytest.mark.parametrize("value", ["24:00", "9:00", "12:60", "noon", "", None])
def test_malformed_times_are_rejected(value):
    assert try_parse_minutes(value) is None
    if value is not None:
        with pytest.raises(SchedulingValidationError):
            parse_time_to_minutes(value)


def test_shared_boundary_is_not_an_overlap():
    assert not overlaps(slot("Monday", "09:00", "10:00"), slot("Monday", "10:00", "11:00"))
    assert not overlaps(slot("Monday", "10:00", "11:00"), slot("Monday", "09:00", "10:00"))


def test_partial_and_contained_intervals_overlap():
    assert overlaps(slot("Monday", "09:00", "10:30"), slot("Monday", "10:00", "11:00"))
    assert overlaps(slot("Monday", "08:00", "12:00"), slot("Monday", "09:00", "10:00"))
    assert overlaps(slot("Monday", "09:00", "10:00"), slot("Monday", "09:00", "10:00"))


def test_same_time_on_different_days_does_not_overlap():
    assert not overlaps(slot("Monday", "08:00", "10:00"), slot("Tuesday", "08:00", "10:00"))


def test_well_formed_requires_start_before_end():
    assert is_well_formed(slot("Friday", "08:00", "08:01"))
    assert not is_well_formed(slot("Friday", "10:00", "10:00"))
    assert not is_well_formed(slot("Friday", "11:00", "10:00"))


def test_validated_slot_reports_defects():
    with pytest.raises(SchedulingValidationError, match="End time must be after start time"):
        validated_slot("Monday", "10:00", "09:00")
    with pytest.raises(SchedulingValidationError, match="Invalid day value"):
        validated_slot("Funday", "09:00", "10:00")

    valid = validated_slot("Wednesday", "13:15", "14:45")
    assert valid.duration_minutes == 90
    assert valid.label == "13:15 - 14:45"


def test_weekday_name():
    assert weekday_name(date(2026, 10, 19)) == "Monday"
    assert weekday_name(date(2026, 10, 23)) == "Friday"
    assert weekday_name(date(2026, 10, 25)) == "Sunday"


def test_default_term_follows_calendar_half():
    assert default_term(date(2026, 3, 1)) == ("2026-2027", 1)
    assert default_term(date(2026, 6, 30)) == ("2026-2027", 1)
    assert default_term(date(2026, 10, 18)) == ("2026-2027", 2)


def test_resolve_term_keeps_explicit_values():
    assert resolve_term("2024-2025", 2, today=date(2026, 3, 1)) == ("2024-2025", 2)
    assert resolve_term(None, None, today=date(2026, 3, 1)) == ("2026-2027", 1)
    assert resolve_term("2023-2024", None, today=date(2026, 9, 1)) == ("2023-2024", 2)
