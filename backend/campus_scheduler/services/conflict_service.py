from __future__ import annotations

from dataclasses import dataclass, field

from campus_scheduler.models.schedule import ClassSchedule
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.timeslot import TimeSlot, overlaps


@dataclass(frozen=True)
class ScheduleCandidate:
    """A placement that has not been persisted yet (or the merged state of an update)."""

    course_id: str
    instructor_id: str
    academic_year: str
    semester: int
    department: str
    day_of_week: str
    start_time: str
    end_time: str
    room_number: str | None = None

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot.from_strings(self.day_of_week, self.start_time, self.end_time)


def entry_slot(entry: ClassSchedule) -> TimeSlot:
    return TimeSlot.from_strings(entry.day_of_week, entry.start_time, entry.end_time)


def _conflict_summary(entry: ClassSchedule) -> dict:
    return {
        "id": entry.id,
        "course": entry.course_id,
        "instructorId": entry.instructor_id,
        "roomNumber": entry.room_number,
        "day": entry.day_of_week,
        "time": entry.time_label,
    }


@dataclass
class ConflictResult:
    instructor_conflicts: list[ClassSchedule] = field(default_factory=list)
    room_conflicts: list[ClassSchedule] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.instructor_conflicts or self.room_conflicts)

    def to_details(self) -> dict:
        return {
            "instructorConflicts": bool(self.instructor_conflicts),
            "roomConflicts": bool(self.room_conflicts),
            "details": {
                "instructorConflicts": [_conflict_summary(item) for item in self.instructor_conflicts],
                "roomConflicts": [_conflict_summary(item) for item in self.room_conflicts],
            },
        }


class ConflictService:
    """Finds active entries that would double-book the candidate's instructor or room.

    Scans the candidate's term scope and day on every call; the entry being
    updated (``exclude_id``) is never compared against itself.
    """

    def __init__(self, store: ScheduleStore):
        self.store = store

    def find_conflicts(self, candidate: ScheduleCandidate, exclude_id: str | None = None) -> ConflictResult:
        candidate_slot = candidate.slot
        same_day = self.store.list_active(
            candidate.academic_year,
            candidate.semester,
            department=candidate.department,
            day_of_week=candidate.day_of_week,
        )

        result = ConflictResult()
        for entry in same_day:
            if exclude_id is not None and entry.id == exclude_id:
                continue
            if not overlaps(candidate_slot, entry_slot(entry)):
                continue
            if entry.instructor_id == candidate.instructor_id:
                result.instructor_conflicts.append(entry)
            if candidate.room_number and entry.room_number == candidate.room_number:
                result.room_conflicts.append(entry)
        return result

    def busy_entries(
        self,
        slot: TimeSlot,
        academic_year: str,
        semester: int,
    ) -> list[ClassSchedule]:
        """Active entries in the (academic_year, semester) scope that overlap ``slot``, any department."""
        same_day = self.store.list_active(academic_year, semester, day_of_week=slot.day)
        return [entry for entry in same_day if overlaps(slot, entry_slot(entry))]
