from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_scheduler.models.schedule import ClassSchedule, Department, ScheduleStatus
from campus_scheduler.services.timeslot import DAY_ORDER, try_parse_minutes


def sort_by_placement(entries: Iterable[ClassSchedule]) -> list[ClassSchedule]:
    return sorted(
        entries,
        key=lambda item: (
            DAY_ORDER.get(item.day_of_week, 99),
            try_parse_minutes(item.start_time) or 0,
            item.id,
        ),
    )


class ScheduleStore:
    """Narrow read/write access to ``class_schedules``.

    Every write commits immediately so the next read sees it. No scheduling
    rules live here.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, schedule_id: str) -> ClassSchedule | None:
        return self.db.get(ClassSchedule, schedule_id)

    def add(self, entry: ClassSchedule) -> ClassSchedule:
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def save(self, entry: ClassSchedule) -> ClassSchedule:
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def remove(self, entry: ClassSchedule) -> None:
        self.db.delete(entry)
        self.db.commit()

    def _active_term_query(self, academic_year: str, semester: int):
        return select(ClassSchedule).where(
            ClassSchedule.academic_year == academic_year,
            ClassSchedule.semester == semester,
            ClassSchedule.status == ScheduleStatus.active,
        )

    def list_active(
        self,
        academic_year: str,
        semester: int,
        department: str | None = None,
        day_of_week: str | None = None,
    ) -> list[ClassSchedule]:
        query = self._active_term_query(academic_year, semester)
        if department is not None:
            query = query.where(ClassSchedule.department == Department(department))
        if day_of_week is not None:
            query = query.where(ClassSchedule.day_of_week == day_of_week)
        return sort_by_placement(self.db.execute(query).scalars())

    def list_for_instructor(self, instructor_id: str, academic_year: str, semester: int) -> list[ClassSchedule]:
        query = self._active_term_query(academic_year, semester).where(ClassSchedule.instructor_id == instructor_id)
        return sort_by_placement(self.db.execute(query).scalars())

    def list_for_room(self, room_number: str, academic_year: str, semester: int) -> list[ClassSchedule]:
        query = self._active_term_query(academic_year, semester).where(ClassSchedule.room_number == room_number)
        return sort_by_placement(self.db.execute(query).scalars())

    def list_for_courses(self, course_ids: Iterable[str], academic_year: str, semester: int) -> list[ClassSchedule]:
        ids = sorted(set(course_ids))
        if not ids:
            return []
        query = self._active_term_query(academic_year, semester).where(ClassSchedule.course_id.in_(ids))
        return sort_by_placement(self.db.execute(query).scalars())

    def list_for_course(self, course_id: str, academic_year: str, semester: int) -> list[ClassSchedule]:
        return self.list_for_courses([course_id], academic_year, semester)

    def distinct_room_numbers(self) -> list[str]:
        # Rooms are known only through the entries that used them, in any term or state.
        rows = self.db.execute(
            select(ClassSchedule.room_number).where(ClassSchedule.room_number.is_not(None)).distinct()
        ).scalars()
        return sorted({room for room in rows if room})

    def find_active_session(self, course_id: str, instructor_id: str, day_of_week: str) -> ClassSchedule | None:
        query = select(ClassSchedule).where(
            ClassSchedule.course_id == course_id,
            ClassSchedule.instructor_id == instructor_id,
            ClassSchedule.day_of_week == day_of_week,
            ClassSchedule.status == ScheduleStatus.active,
        )
        matches = sort_by_placement(self.db.execute(query).scalars())
        return matches[0] if matches else None
