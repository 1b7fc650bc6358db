from __future__ import annotations

from datetime import date

from campus_scheduler.core.exceptions import ResourceNotFoundError
from campus_scheduler.models.schedule import ClassSchedule, Department
from campus_scheduler.schemas.schedule import (
    CourseHeaderOut,
    CourseScheduleOut,
    DepartmentScheduleOut,
    InstructorOut,
    InstructorScheduleOut,
    ScheduleFiltersOut,
    ScheduleSlotOut,
    SessionLookupOut,
    StudentScheduleOut,
    empty_day_map,
)
from campus_scheduler.services.collaborators import (
    CourseDirectory,
    CourseInfo,
    EnrollmentDirectory,
    InstructorInfo,
    InstructorRoster,
)
from campus_scheduler.services.conflict_service import entry_slot
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.timeslot import weekday_name


def _instructor_out(info: InstructorInfo | None) -> InstructorOut | None:
    if info is None:
        return None
    return InstructorOut(id=info.id, name=info.name, email=info.email, department=info.department)


def _slot_out(
    entry: ClassSchedule,
    course: CourseInfo | None,
    instructor: InstructorInfo | None,
) -> ScheduleSlotOut:
    return ScheduleSlotOut(
        id=entry.id,
        course_id=entry.course_id,
        course_code=course.code if course else None,
        course_name=course.name if course else None,
        credit=course.credit if course else None,
        year=course.year if course else None,
        department=Department(entry.department).value,
        instructor=_instructor_out(instructor),
        day_of_week=entry.day_of_week,
        start_time=entry.start_time,
        end_time=entry.end_time,
        room_number=entry.room_number,
        duration=entry_slot(entry).duration_minutes,
    )


class ScheduleProjections:
    """Shapes active entries into the per-audience timetables.

    Every day map carries all seven weekdays, each list ordered by start time.
    """

    def __init__(
        self,
        store: ScheduleStore,
        courses: CourseDirectory,
        roster: InstructorRoster,
        enrollments: EnrollmentDirectory,
    ):
        self.store = store
        self.courses = courses
        self.roster = roster
        self.enrollments = enrollments

    def _slots(self, entries: list[ClassSchedule]) -> list[ScheduleSlotOut]:
        courses = self.courses.lookup(entry.course_id for entry in entries)
        instructors = self.roster.lookup(entry.instructor_id for entry in entries)
        return [
            _slot_out(entry, courses.get(entry.course_id), instructors.get(entry.instructor_id))
            for entry in entries
        ]

    def _day_map(self, entries: list[ClassSchedule]) -> dict[str, list[ScheduleSlotOut]]:
        by_day = empty_day_map()
        # Store results are already in placement order.
        for slot in self._slots(entries):
            by_day[slot.day_of_week].append(slot)
        return by_day

    def for_department(self, department: str, academic_year: str, semester: int) -> DepartmentScheduleOut:
        entries = self.store.list_active(academic_year, semester, department=department)
        by_day = self._day_map(entries)

        rooms = sorted({entry.room_number for entry in entries if entry.room_number})
        instructors: dict[str, InstructorOut] = {}
        for slots in by_day.values():
            for slot in slots:
                if slot.instructor is not None:
                    instructors.setdefault(slot.instructor.id, slot.instructor)

        return DepartmentScheduleOut(
            schedule_by_day=by_day,
            academic_year=academic_year,
            semester=semester,
            total_entries=len(entries),
            department=Department(department),
            filters=ScheduleFiltersOut(
                rooms=rooms,
                instructors=sorted(instructors.values(), key=lambda item: (item.name, item.id)),
            ),
        )

    def for_student(self, student_id: str, academic_year: str, semester: int) -> StudentScheduleOut:
        course_ids = self.enrollments.course_ids_for_student(student_id, academic_year, semester)
        entries = self.store.list_for_courses(course_ids, academic_year, semester)
        return StudentScheduleOut(
            schedule_by_day=self._day_map(entries),
            academic_year=academic_year,
            semester=semester,
            total_entries=len(entries),
            student_id=student_id,
            total_courses=len(course_ids),
        )

    def for_instructor(self, instructor_id: str, academic_year: str, semester: int) -> InstructorScheduleOut:
        entries = self.store.list_for_instructor(instructor_id, academic_year, semester)
        total_minutes = sum(entry_slot(entry).duration_minutes for entry in entries)
        return InstructorScheduleOut(
            schedule_by_day=self._day_map(entries),
            academic_year=academic_year,
            semester=semester,
            total_entries=len(entries),
            instructor_id=instructor_id,
            total_hours_per_week=round(total_minutes / 60, 1),
        )

    def for_course(self, course_id: str, academic_year: str, semester: int) -> CourseScheduleOut:
        course = self.courses.lookup([course_id]).get(course_id)
        if course is None:
            raise ResourceNotFoundError("Course", course_id)
        entries = self.store.list_for_course(course_id, academic_year, semester)
        if not entries:
            raise ResourceNotFoundError("Schedule for course", course_id)

        return CourseScheduleOut(
            course=CourseHeaderOut(
                id=course.id,
                code=course.code,
                name=course.name,
                credit=course.credit,
                department=course.department,
                year=course.year,
                semester=course.semester,
            ),
            schedule=self._slots(entries),
            academic_year=academic_year,
            semester=semester,
        )

    def session_for_date(self, course_id: str, instructor_id: str, on_date: date) -> SessionLookupOut:
        day = weekday_name(on_date)
        entry = self.store.find_active_session(course_id, instructor_id, day)
        if entry is None:
            return SessionLookupOut(scheduled=False, day_of_week=day)
        return SessionLookupOut(scheduled=True, day_of_week=day, session=self._slots([entry])[0])
