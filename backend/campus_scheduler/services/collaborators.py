"""Read-only views of data the scheduling core refers to but does not own.

Courses, users, registrations and attendance are maintained elsewhere; the
scheduling services only depend on the protocols below. The ``Sql*`` classes
are the default implementations backed by the shared database.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from campus_scheduler.models.attendance import AttendanceRecord
from campus_scheduler.models.course import Course
from campus_scheduler.models.registration import Registration, RegistrationStatus
from campus_scheduler.models.user import User, UserRole


@dataclass(frozen=True)
class InstructorInfo:
    id: str
    name: str
    email: str
    department: str | None = None


@dataclass(frozen=True)
class CourseInfo:
    id: str
    code: str
    name: str
    credit: int
    department: str
    year: int
    semester: int


class InstructorRoster(Protocol):
    def list_instructors(self, department: str | None = None) -> list[InstructorInfo]: ...

    def lookup(self, instructor_ids: Iterable[str]) -> dict[str, InstructorInfo]: ...

    def is_instructor(self, user_id: str) -> bool: ...


class CourseDirectory(Protocol):
    def lookup(self, course_ids: Iterable[str]) -> dict[str, CourseInfo]: ...

    def exists(self, course_id: str) -> bool: ...


class EnrollmentDirectory(Protocol):
    def course_ids_for_student(self, student_id: str, academic_year: str, semester: int) -> list[str]: ...


class AttendanceLedger(Protocol):
    def count_for_schedule(self, schedule_id: str) -> int: ...


def _instructor_info(user: User) -> InstructorInfo:
    return InstructorInfo(id=user.id, name=user.full_name, email=user.email, department=user.department)


class SqlInstructorRoster:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_instructors(self, department: str | None = None) -> list[InstructorInfo]:
        users = self.db.execute(
            select(User)
            .where(User.role == UserRole.instructor, User.is_active.is_(True))
            .order_by(User.first_name, User.father_name, User.id)
        ).scalars()
        instructors = [_instructor_info(user) for user in users]
        if department is None:
            return instructors
        # Instructors without a home department may teach anywhere.
        return [item for item in instructors if not item.department or item.department == department]

    def lookup(self, instructor_ids: Iterable[str]) -> dict[str, InstructorInfo]:
        ids = sorted(set(instructor_ids))
        if not ids:
            return {}
        users = self.db.execute(select(User).where(User.id.in_(ids))).scalars()
        return {user.id: _instructor_info(user) for user in users}

    def is_instructor(self, user_id: str) -> bool:
        user = self.db.get(User, user_id)
        return user is not None and user.role == UserRole.instructor


class SqlCourseDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def lookup(self, course_ids: Iterable[str]) -> dict[str, CourseInfo]:
        ids = sorted(set(course_ids))
        if not ids:
            return {}
        courses = self.db.execute(select(Course).where(Course.id.in_(ids))).scalars()
        return {
            course.id: CourseInfo(
                id=course.id,
                code=course.code,
                name=course.name,
                credit=course.credit,
                department=course.department,
                year=course.year,
                semester=course.semester,
            )
            for course in courses
        }

    def exists(self, course_id: str) -> bool:
        return self.db.get(Course, course_id) is not None


class SqlEnrollmentDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def course_ids_for_student(self, student_id: str, academic_year: str, semester: int) -> list[str]:
        registrations = self.db.execute(
            select(Registration).where(
                Registration.student_id == student_id,
                Registration.academic_year == academic_year,
                Registration.semester == semester,
                Registration.status != RegistrationStatus.cancelled,
            )
        ).scalars()
        course_ids: set[str] = set()
        for registration in registrations:
            course_ids.update(registration.course_ids or [])
        return sorted(course_ids)


class SqlAttendanceLedger:
    def __init__(self, db: Session) -> None:
        self.db = db

    def count_for_schedule(self, schedule_id: str) -> int:
        return int(
            self.db.execute(
                select(func.count(AttendanceRecord.id)).where(AttendanceRecord.class_schedule_id == schedule_id)
            ).scalar_one()
            or 0
        )
