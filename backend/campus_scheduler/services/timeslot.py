"""Weekly time slots and the overlap rule used by every conflict check.

Times are "HH:MM" strings compared as minute-of-day integers. Intervals are
half-open, so a class ending at 10:00 never collides with one starting at
10:00 on the same day.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from campus_scheduler.core.exceptions import SchedulingValidationError

DAYS_OF_WEEK: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
DAY_VALUES = set(DAYS_OF_WEEK)
DAY_ORDER = {day: index for index, day in enumerate(DAYS_OF_WEEK)}

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 24 * 60


def try_parse_minutes(value: str | None) -> int | None:
    if value is None or not TIME_PATTERN.match(value):
        return None
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def parse_time_to_minutes(value: str) -> int:
    minutes = try_parse_minutes(value)
    if minutes is None:
        raise SchedulingValidationError(
            "Time must be in HH:MM 24-hour format",
            details={"value": value},
        )
    return minutes


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(on_date: date) -> str:
    return DAYS_OF_WEEK[on_date.weekday()]


@dataclass(frozen=True)
class TimeSlot:
    day: str
    start: int
    end: int

    @classmethod
    def from_strings(cls, day: str, start_time: str, end_time: str) -> "TimeSlot":
        if day not in DAY_VALUES:
            raise SchedulingValidationError("Invalid day value", details={"value": day})
        return cls(day=day, start=parse_time_to_minutes(start_time), end=parse_time_to_minutes(end_time))

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def label(self) -> str:
        return f"{format_minutes(self.start)} - {format_minutes(self.end)}"


def is_well_formed(slot: TimeSlot) -> bool:
    if not (0 <= slot.start < MINUTES_PER_DAY and 0 <= slot.end < MINUTES_PER_DAY):
        return False
    return slot.start < slot.end


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    return a.day == b.day and a.start < b.end and b.start < a.end


def validated_slot(day: str, start_time: str, end_time: str) -> TimeSlot:
    """Parse and check a placement, raising ``SchedulingValidationError`` on any defect."""
    slot = TimeSlot.from_strings(day, start_time, end_time)
    if not is_well_formed(slot):
        raise SchedulingValidationError(
            "End time must be after start time",
            details={"startTime": start_time, "endTime": end_time},
        )
    return slot
