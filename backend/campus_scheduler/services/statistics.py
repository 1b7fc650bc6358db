from __future__ import annotations

from collections import defaultdict

from campus_scheduler.models.schedule import ClassSchedule, Department
from campus_scheduler.schemas.statistics import (
    DayStatOut,
    DepartmentStatOut,
    InstructorLoadOut,
    RoomUtilizationOut,
    ScheduleStatsOut,
)
from campus_scheduler.services.collaborators import InstructorRoster
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.timeslot import DAY_ORDER


def _ordered_days(days: set[str]) -> list[str]:
    return sorted(days, key=lambda day: DAY_ORDER.get(day, 99))


def _department_label(entry: ClassSchedule) -> str:
    return Department(entry.department).value


def _department_stats(entries: list[ClassSchedule]) -> list[DepartmentStatOut]:
    by_department: dict[str, list[ClassSchedule]] = defaultdict(list)
    for entry in entries:
        by_department[_department_label(entry)].append(entry)

    output: list[DepartmentStatOut] = []
    for department in sorted(by_department):
        department_entries = by_department[department]
        by_day: dict[str, list[ClassSchedule]] = defaultdict(list)
        for entry in department_entries:
            by_day[entry.day_of_week].append(entry)

        day_stats = [
            DayStatOut(
                day=day,
                count=len(by_day[day]),
                course_count=len({item.course_id for item in by_day[day]}),
                instructor_count=len({item.instructor_id for item in by_day[day]}),
                room_count=len({item.room_number for item in by_day[day] if item.room_number}),
            )
            for day in _ordered_days(set(by_day))
        ]
        output.append(
            DepartmentStatOut(
                department=department,
                day_stats=day_stats,
                total_classes=len(department_entries),
                unique_courses=len({item.course_id for item in department_entries}),
                unique_instructors=len({item.instructor_id for item in department_entries}),
                unique_rooms=len({item.room_number for item in department_entries if item.room_number}),
            )
        )
    return output


def _room_utilization(entries: list[ClassSchedule]) -> list[RoomUtilizationOut]:
    counts: dict[str, int] = defaultdict(int)
    days: dict[str, set[str]] = defaultdict(set)
    for entry in entries:
        if not entry.room_number:
            continue
        counts[entry.room_number] += 1
        days[entry.room_number].add(entry.day_of_week)

    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [RoomUtilizationOut(room=room, count=count, days=_ordered_days(days[room])) for room, count in ordered]


class ScheduleStatistics:
    """Read-only load summaries over the active entries of a term.

    Output ordering is fully determined by the data, so two runs with no
    intervening write produce identical results.
    """

    def __init__(self, store: ScheduleStore, roster: InstructorRoster):
        self.store = store
        self.roster = roster

    def _instructor_load(self, entries: list[ClassSchedule]) -> list[InstructorLoadOut]:
        grouped: dict[str, list[ClassSchedule]] = defaultdict(list)
        for entry in entries:
            grouped[entry.instructor_id].append(entry)
        instructors = self.roster.lookup(grouped)

        output: list[InstructorLoadOut] = []
        for instructor_id, instructor_entries in grouped.items():
            info = instructors.get(instructor_id)
            courses = sorted({item.course_id for item in instructor_entries})
            output.append(
                InstructorLoadOut(
                    instructor_id=instructor_id,
                    instructor_name=info.name if info else instructor_id,
                    department=info.department if info else None,
                    count=len(instructor_entries),
                    days=_ordered_days({item.day_of_week for item in instructor_entries}),
                    course_count=len(courses),
                    courses=courses,
                )
            )
        output.sort(key=lambda item: (-item.count, item.instructor_name, item.instructor_id))
        return output

    def compute(self, academic_year: str, semester: int, department: str | None = None) -> ScheduleStatsOut:
        entries = self.store.list_active(academic_year, semester, department=department)
        return ScheduleStatsOut(
            academic_year=academic_year,
            semester=semester,
            department_filter=Department(department).value if department else "All",
            department_stats=_department_stats(entries),
            room_utilization=_room_utilization(entries),
            instructor_load=self._instructor_load(entries),
        )
