from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from campus_scheduler.models.schedule import ClassSchedule, Department, ScheduleStatus
from campus_scheduler.services.timeslot import DAY_VALUES, DAYS_OF_WEEK, TIME_PATTERN, try_parse_minutes

ACADEMIC_YEAR_PATTERN = r"^\d{4}-\d{4}$"


class AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _validate_day(value: str | None) -> str | None:
    if value is None:
        return value
    day = value.strip()
    if day not in DAY_VALUES:
        raise ValueError("Invalid day value")
    return day


def _validate_time(value: str | None) -> str | None:
    if value is None:
        return value
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def _normalize_room(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class ScheduleCreate(AliasedModel):
    course_id: str = Field(alias="courseId", min_length=1, max_length=36)
    instructor_id: str = Field(alias="instructorId", min_length=1, max_length=36)
    academic_year: str = Field(alias="academicYear", pattern=ACADEMIC_YEAR_PATTERN)
    semester: int = Field(ge=1, le=2)
    department: Department
    day_of_week: str = Field(alias="dayOfWeek")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room_number: str | None = Field(default=None, alias="roomNumber", max_length=20)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: str | None) -> str | None:
        return _validate_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _validate_time(value)

    @field_validator("room_number")
    @classmethod
    def normalize_room(cls, value: str | None) -> str | None:
        return _normalize_room(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleCreate":
        if try_parse_minutes(self.end_time) <= try_parse_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self


class ScheduleUpdate(AliasedModel):
    course_id: str | None = Field(default=None, alias="courseId", min_length=1, max_length=36)
    instructor_id: str | None = Field(default=None, alias="instructorId", min_length=1, max_length=36)
    academic_year: str | None = Field(default=None, alias="academicYear", pattern=ACADEMIC_YEAR_PATTERN)
    semester: int | None = Field(default=None, ge=1, le=2)
    department: Department | None = None
    day_of_week: str | None = Field(default=None, alias="dayOfWeek")
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    room_number: str | None = Field(default=None, alias="roomNumber", max_length=20)
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: str | None) -> str | None:
        return _validate_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _validate_time(value)

    @field_validator("room_number")
    @classmethod
    def normalize_room(cls, value: str | None) -> str | None:
        return _normalize_room(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleUpdate":
        if self.start_time is not None and self.end_time is not None:
            if try_parse_minutes(self.end_time) <= try_parse_minutes(self.start_time):
                raise ValueError("End time must be after start time")
        return self


class ScheduleOut(AliasedModel):
    id: str
    course_id: str = Field(alias="courseId")
    instructor_id: str = Field(alias="instructorId")
    created_by: str = Field(alias="createdBy")
    academic_year: str = Field(alias="academicYear")
    semester: int
    department: Department
    day_of_week: str = Field(alias="dayOfWeek")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room_number: str | None = Field(default=None, alias="roomNumber")
    notes: str | None = None
    status: ScheduleStatus
    is_active: bool = Field(alias="isActive")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @classmethod
    def from_entry(cls, entry: ClassSchedule) -> "ScheduleOut":
        return cls(
            id=entry.id,
            course_id=entry.course_id,
            instructor_id=entry.instructor_id,
            created_by=entry.created_by,
            academic_year=entry.academic_year,
            semester=entry.semester,
            department=entry.department,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
            room_number=entry.room_number,
            notes=entry.notes,
            status=entry.status,
            is_active=entry.is_active,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class DeleteOutcomeOut(AliasedModel):
    deleted: bool = False
    deactivated: bool = False
    attendance_count: int = Field(default=0, alias="attendanceCount")
    message: str


class InstructorOut(AliasedModel):
    id: str
    name: str
    email: str
    department: str | None = None


class InstructorAvailabilityOut(AliasedModel):
    available_instructors: list[InstructorOut] = Field(default_factory=list, alias="availableInstructors")
    total_available: int = Field(alias="totalAvailable")
    total_instructors: int = Field(alias="totalInstructors")
    busy_instructors: int = Field(alias="busyInstructors")


class RoomAvailabilityOut(AliasedModel):
    available_rooms: list[str] = Field(default_factory=list, alias="availableRooms")
    total_available: int = Field(alias="totalAvailable")
    total_rooms: int = Field(alias="totalRooms")
    busy_rooms: list[str] = Field(default_factory=list, alias="busyRooms")


class ScheduleSlotOut(AliasedModel):
    id: str
    course_id: str = Field(alias="courseId")
    course_code: str | None = Field(default=None, alias="courseCode")
    course_name: str | None = Field(default=None, alias="courseName")
    credit: int | None = None
    year: int | None = None
    department: str
    instructor: InstructorOut | None = None
    day_of_week: str = Field(alias="dayOfWeek")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room_number: str | None = Field(default=None, alias="roomNumber")
    duration: int


def empty_day_map() -> dict[str, list[ScheduleSlotOut]]:
    return {day: [] for day in DAYS_OF_WEEK}


class ScheduleFiltersOut(AliasedModel):
    rooms: list[str] = Field(default_factory=list)
    instructors: list[InstructorOut] = Field(default_factory=list)


class DayScheduleOut(AliasedModel):
    schedule_by_day: dict[str, list[ScheduleSlotOut]] = Field(default_factory=empty_day_map, alias="scheduleByDay")
    academic_year: str = Field(alias="academicYear")
    semester: int
    total_entries: int = Field(alias="totalEntries")


class DepartmentScheduleOut(DayScheduleOut):
    department: Department
    filters: ScheduleFiltersOut = Field(default_factory=ScheduleFiltersOut)


class StudentScheduleOut(DayScheduleOut):
    student_id: str = Field(alias="studentId")
    total_courses: int = Field(alias="totalCourses")


class InstructorScheduleOut(DayScheduleOut):
    instructor_id: str = Field(alias="instructorId")
    total_hours_per_week: float = Field(alias="totalHoursPerWeek")


class CourseHeaderOut(AliasedModel):
    id: str
    code: str
    name: str
    credit: int
    department: str
    year: int
    semester: int


class CourseScheduleOut(AliasedModel):
    course: CourseHeaderOut
    schedule: list[ScheduleSlotOut] = Field(default_factory=list)
    academic_year: str = Field(alias="academicYear")
    semester: int


class SessionLookupOut(AliasedModel):
    scheduled: bool
    day_of_week: str = Field(alias="dayOfWeek")
    session: ScheduleSlotOut | None = None
