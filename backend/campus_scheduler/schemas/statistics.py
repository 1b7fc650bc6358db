from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DayStatOut(BaseModel):
    day: str
    count: int
    course_count: int = Field(alias="courseCount")
    instructor_count: int = Field(alias="instructorCount")
    room_count: int = Field(alias="roomCount")

    model_config = ConfigDict(populate_by_name=True)


class DepartmentStatOut(BaseModel):
    department: str
    day_stats: list[DayStatOut] = Field(default_factory=list, alias="dayStats")
    total_classes: int = Field(alias="totalClasses")
    unique_courses: int = Field(alias="uniqueCourses")
    unique_instructors: int = Field(alias="uniqueInstructors")
    unique_rooms: int = Field(alias="uniqueRooms")

    model_config = ConfigDict(populate_by_name=True)


class RoomUtilizationOut(BaseModel):
    room: str
    count: int
    days: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class InstructorLoadOut(BaseModel):
    instructor_id: str = Field(alias="instructorId")
    instructor_name: str = Field(alias="instructorName")
    department: str | None = None
    count: int
    days: list[str] = Field(default_factory=list)
    course_count: int = Field(alias="courseCount")
    courses: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ScheduleStatsOut(BaseModel):
    academic_year: str = Field(alias="academicYear")
    semester: int
    department_filter: str = Field(alias="departmentFilter")
    department_stats: list[DepartmentStatOut] = Field(default_factory=list, alias="departmentStats")
    room_utilization: list[RoomUtilizationOut] = Field(default_factory=list, alias="roomUtilization")
    instructor_load: list[InstructorLoadOut] = Field(default_factory=list, alias="instructorLoad")

    model_config = ConfigDict(populate_by_name=True)
