from __future__ import annotations

from dataclasses import dataclass, field

from campus_scheduler.services.collaborators import InstructorInfo, InstructorRoster
from campus_scheduler.services.conflict_service import ConflictService
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.timeslot import validated_slot


@dataclass
class InstructorAvailability:
    available: list[InstructorInfo] = field(default_factory=list)
    busy: list[InstructorInfo] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.available) + len(self.busy)


@dataclass
class RoomAvailability:
    available: list[str] = field(default_factory=list)
    busy: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.available) + len(self.busy)


class AvailabilityResolver:
    """Answers "who/what is free for this slot" as the complement of the conflict scan.

    An instructor or room is available when no active entry in the
    (academic_year, semester) scope overlaps the slot. Empty answers are
    valid: the slot may be fully booked or no rooms may be known yet.
    """

    def __init__(self, store: ScheduleStore, conflicts: ConflictService, roster: InstructorRoster):
        self.store = store
        self.conflicts = conflicts
        self.roster = roster

    def _busy(self, day_of_week: str, start_time: str, end_time: str, academic_year: str, semester: int):
        slot = validated_slot(day_of_week, start_time, end_time)
        return self.conflicts.busy_entries(slot, academic_year, semester)

    def busy_instructor_ids(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        academic_year: str,
        semester: int,
    ) -> set[str]:
        entries = self._busy(day_of_week, start_time, end_time, academic_year, semester)
        return {entry.instructor_id for entry in entries}

    def instructors(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        academic_year: str,
        semester: int,
        department: str | None = None,
    ) -> InstructorAvailability:
        busy_ids = self.busy_instructor_ids(day_of_week, start_time, end_time, academic_year, semester)
        result = InstructorAvailability()
        for instructor in self.roster.list_instructors(department):
            if instructor.id in busy_ids:
                result.busy.append(instructor)
            else:
                result.available.append(instructor)
        return result

    def available_instructors(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        academic_year: str,
        semester: int,
        department: str | None = None,
    ) -> list[InstructorInfo]:
        return self.instructors(day_of_week, start_time, end_time, academic_year, semester, department).available

    def rooms(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        academic_year: str,
        semester: int,
    ) -> RoomAvailability:
        entries = self._busy(day_of_week, start_time, end_time, academic_year, semester)
        busy_rooms = {entry.room_number for entry in entries if entry.room_number}
        known_rooms = self.store.distinct_room_numbers()
        return RoomAvailability(
            available=[room for room in known_rooms if room not in busy_rooms],
            busy=sorted(busy_rooms),
        )

    def available_rooms(
        self,
        day_of_week: str,
        start_time: str,
        end_time: str,
        academic_year: str,
        semester: int,
    ) -> list[str]:
        return self.rooms(day_of_week, start_time, end_time, academic_year, semester).available
