from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
import logging
from threading import Lock
from typing import Iterator

from campus_scheduler.core.exceptions import (
    ResourceNotFoundError,
    SchedulingConflictError,
    SchedulingValidationError,
)
from campus_scheduler.models.schedule import ClassSchedule, Department, ScheduleStatus
from campus_scheduler.schemas.schedule import ScheduleCreate, ScheduleUpdate
from campus_scheduler.services.collaborators import AttendanceLedger, CourseDirectory, InstructorRoster
from campus_scheduler.services.conflict_service import ConflictService, ScheduleCandidate
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.timeslot import validated_slot

logger = logging.getLogger(__name__)

# Fields whose change can create a new double-booking.
PLACEMENT_FIELDS = {
    "instructor_id",
    "academic_year",
    "semester",
    "department",
    "day_of_week",
    "start_time",
    "end_time",
    "room_number",
}
REQUIRED_FIELDS = PLACEMENT_FIELDS - {"room_number"} | {"course_id"}
CANDIDATE_FIELDS = {item.name for item in fields(ScheduleCandidate)}


class TermScopeLocks:
    """One lock per (academic_year, semester, department) so read-check-write is serialized per scope."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, int, str], Lock] = defaultdict(Lock)
        self._guard = Lock()

    @contextmanager
    def hold(self, academic_year: str, semester: int, department: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks[(academic_year, int(semester), str(Department(department).value))]
        with lock:
            yield

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_term_locks = TermScopeLocks()


@dataclass(frozen=True)
class DeleteOutcome:
    schedule_id: str
    snapshot: dict
    deleted: bool
    deactivated: bool
    attendance_count: int = 0


def schedule_snapshot(entry: ClassSchedule) -> dict:
    return {
        "id": entry.id,
        "courseId": entry.course_id,
        "instructorId": entry.instructor_id,
        "department": Department(entry.department).value,
        "dayOfWeek": entry.day_of_week,
        "startTime": entry.start_time,
        "endTime": entry.end_time,
        "roomNumber": entry.room_number,
        "isActive": entry.is_active,
    }


def _candidate_from(entry: ClassSchedule) -> ScheduleCandidate:
    return ScheduleCandidate(
        course_id=entry.course_id,
        instructor_id=entry.instructor_id,
        academic_year=entry.academic_year,
        semester=entry.semester,
        department=Department(entry.department).value,
        day_of_week=entry.day_of_week,
        start_time=entry.start_time,
        end_time=entry.end_time,
        room_number=entry.room_number or None,
    )


class ScheduleLifecycleManager:
    """Create, update and delete schedule entries while keeping instructors and rooms single-booked.

    Deleting an entry that attendance already references retires it instead;
    retired entries are terminal and cannot be updated.
    """

    def __init__(
        self,
        store: ScheduleStore,
        conflicts: ConflictService,
        attendance: AttendanceLedger,
        courses: CourseDirectory | None = None,
        roster: InstructorRoster | None = None,
        locks: TermScopeLocks | None = None,
    ):
        self.store = store
        self.conflicts = conflicts
        self.attendance = attendance
        self.courses = courses
        self.roster = roster
        self.locks = locks or _term_locks

    def _check_references(self, course_id: str | None, instructor_id: str | None) -> None:
        if course_id is not None and self.courses is not None and not self.courses.exists(course_id):
            raise ResourceNotFoundError("Course", course_id)
        if instructor_id is not None and self.roster is not None and not self.roster.is_instructor(instructor_id):
            raise ResourceNotFoundError("Instructor", instructor_id)

    def _reject_conflicts(self, candidate: ScheduleCandidate, exclude_id: str | None = None) -> None:
        result = self.conflicts.find_conflicts(candidate, exclude_id=exclude_id)
        if result.has_conflicts:
            logger.warning(
                "Rejected schedule for course %s on %s %s-%s: %d instructor / %d room conflict(s)",
                candidate.course_id,
                candidate.day_of_week,
                candidate.start_time,
                candidate.end_time,
                len(result.instructor_conflicts),
                len(result.room_conflicts),
            )
            raise SchedulingConflictError(details=result.to_details())

    def create(self, payload: ScheduleCreate, created_by: str) -> ClassSchedule:
        validated_slot(payload.day_of_week, payload.start_time, payload.end_time)
        self._check_references(payload.course_id, payload.instructor_id)

        candidate = ScheduleCandidate(
            course_id=payload.course_id,
            instructor_id=payload.instructor_id,
            academic_year=payload.academic_year,
            semester=payload.semester,
            department=Department(payload.department).value,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            room_number=payload.room_number or None,
        )
        with self.locks.hold(candidate.academic_year, candidate.semester, candidate.department):
            self._reject_conflicts(candidate)
            entry = ClassSchedule(
                course_id=candidate.course_id,
                instructor_id=candidate.instructor_id,
                created_by=created_by,
                academic_year=candidate.academic_year,
                semester=candidate.semester,
                department=Department(candidate.department),
                day_of_week=candidate.day_of_week,
                start_time=candidate.start_time,
                end_time=candidate.end_time,
                room_number=candidate.room_number,
                notes=(payload.notes or "").strip() or None,
                status=ScheduleStatus.active,
            )
            self.store.add(entry)

        logger.info(
            "Class schedule created: %s course %s on %s at %s in room %s",
            entry.id,
            entry.course_id,
            entry.day_of_week,
            entry.time_label,
            entry.room_number or "-",
        )
        return entry

    def update(self, schedule_id: str, patch: ScheduleUpdate) -> ClassSchedule:
        entry = self.store.get(schedule_id)
        if entry is None:
            raise ResourceNotFoundError("Schedule", schedule_id)
        if entry.status == ScheduleStatus.retired:
            raise SchedulingValidationError(
                "Retired schedules cannot be modified",
                details={"scheduleId": schedule_id},
            )

        changes = patch.model_dump(exclude_unset=True)
        if "notes" in changes:
            changes["notes"] = (changes["notes"] or "").strip() or None
        for required in REQUIRED_FIELDS:
            if required in changes and changes[required] is None:
                raise SchedulingValidationError(f"{required} cannot be cleared", details={"field": required})
        if "department" in changes:
            changes["department"] = Department(changes["department"])

        self._check_references(changes.get("course_id"), changes.get("instructor_id"))

        candidate_changes = {key: value for key, value in changes.items() if key in CANDIDATE_FIELDS}
        if "department" in candidate_changes:
            candidate_changes["department"] = candidate_changes["department"].value
        if "room_number" in candidate_changes:
            candidate_changes["room_number"] = candidate_changes["room_number"] or None
        merged = replace(_candidate_from(entry), **candidate_changes)
        validated_slot(merged.day_of_week, merged.start_time, merged.end_time)

        placement_changed = any(
            key in changes and changes[key] != getattr(entry, key) for key in PLACEMENT_FIELDS
        )
        with self.locks.hold(merged.academic_year, merged.semester, merged.department):
            if placement_changed:
                self._reject_conflicts(merged, exclude_id=entry.id)
            for key, value in changes.items():
                setattr(entry, key, value)
            self.store.save(entry)

        logger.info(
            "Class schedule updated: %s course %s on %s at %s",
            entry.id,
            entry.course_id,
            entry.day_of_week,
            entry.time_label,
        )
        return entry

    def delete(self, schedule_id: str) -> DeleteOutcome:
        entry = self.store.get(schedule_id)
        if entry is None:
            raise ResourceNotFoundError("Schedule", schedule_id)

        attendance_count = self.attendance.count_for_schedule(entry.id)
        if attendance_count > 0:
            if entry.status != ScheduleStatus.retired:
                entry.retire()
                self.store.save(entry)
            logger.info(
                "Class schedule %s deactivated: %d attendance record(s) reference it",
                entry.id,
                attendance_count,
            )
            return DeleteOutcome(
                schedule_id=entry.id,
                snapshot=schedule_snapshot(entry),
                deleted=False,
                deactivated=True,
                attendance_count=attendance_count,
            )

        snapshot = schedule_snapshot(entry)
        self.store.remove(entry)
        logger.info(
            "Class schedule deleted: %s course %s on %s at %s-%s",
            schedule_id,
            snapshot["courseId"],
            snapshot["dayOfWeek"],
            snapshot["startTime"],
            snapshot["endTime"],
        )
        return DeleteOutcome(schedule_id=schedule_id, snapshot=snapshot, deleted=True, deactivated=False)
