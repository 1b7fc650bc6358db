import os

# The app engine is created at import time; keep it off the local database file.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import uuid  # noqa: E402
from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from campus_scheduler.api.deps import get_db  # noqa: E402
from campus_scheduler.core.security import create_access_token  # noqa: E402
from campus_scheduler.db.base import Base  # noqa: E402
from campus_scheduler.main import app  # noqa: E402
from campus_scheduler.models import (  # noqa: E402
    AttendanceRecord,
    AttendanceStatus,
    ClassSchedule,
    Course,
    Department,
    Registration,
    RegistrationStatus,
    ScheduleStatus,
    User,
    UserRole,
)
from campus_scheduler.services.collaborators import (  # noqa: E402
    SqlAttendanceLedger,
    SqlCourseDirectory,
    SqlEnrollmentDirectory,
    SqlInstructorRoster,
)
from campus_scheduler.services.conflict_service import ConflictService  # noqa: E402
from campus_scheduler.services.lifecycle import ScheduleLifecycleManager, TermScopeLocks, _term_locks  # noqa: E402
from campus_scheduler.services.schedule_store import ScheduleStore  # noqa: E402

ACADEMIC_YEAR = "2024-2025"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Seeded objects stay readable after the commit in the seeding helpers.
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    _term_locks.clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    _term_locks.clear()


@pytest.fixture()
def store(db_session):
    return ScheduleStore(db_session)


@pytest.fixture()
def lifecycle(db_session, store):
    return ScheduleLifecycleManager(
        store,
        ConflictService(store),
        SqlAttendanceLedger(db_session),
        courses=SqlCourseDirectory(db_session),
        roster=SqlInstructorRoster(db_session),
        locks=TermScopeLocks(),
    )


@pytest.fixture()
def roster(db_session):
    return SqlInstructorRoster(db_session)


@pytest.fixture()
def courses(db_session):
    return SqlCourseDirectory(db_session)


@pytest.fixture()
def enrollments(db_session):
    return SqlEnrollmentDirectory(db_session)


@pytest.fixture()
def make_user(db_session):
    def _make(
        role: UserRole = UserRole.instructor,
        first_name: str = "Abebe",
        father_name: str = "Kebede",
        department: str | None = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            first_name=first_name,
            father_name=father_name,
            email=f"{first_name.lower()}.{uuid.uuid4().hex[:8]}@example.com",
            role=role,
            department=department,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_course(db_session):
    def _make(code: str, name: str | None = None, department: str = "ICT", credit: int = 3, year: int = 1) -> Course:
        course = Course(code=code, name=name or f"{code} Course", department=department, credit=credit, year=year)
        db_session.add(course)
        db_session.commit()
        return course

    return _make


@pytest.fixture()
def make_entry(db_session):
    """Insert an entry directly, bypassing conflict checks."""

    def _make(
        course_id: str,
        instructor_id: str,
        day_of_week: str = "Monday",
        start_time: str = "08:00",
        end_time: str = "09:00",
        room_number: str | None = None,
        department: Department = Department.ict,
        academic_year: str = ACADEMIC_YEAR,
        semester: int = 1,
        status: ScheduleStatus = ScheduleStatus.active,
    ) -> ClassSchedule:
        entry = ClassSchedule(
            course_id=course_id,
            instructor_id=instructor_id,
            created_by="seed",
            academic_year=academic_year,
            semester=semester,
            department=department,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            room_number=room_number,
            status=status,
        )
        db_session.add(entry)
        db_session.commit()
        return entry

    return _make


@pytest.fixture()
def make_registration(db_session):
    def _make(
        student_id: str,
        course_ids: list[str],
        academic_year: str = ACADEMIC_YEAR,
        semester: int = 1,
        status: RegistrationStatus = RegistrationStatus.registered,
    ) -> Registration:
        registration = Registration(
            student_id=student_id,
            department="ICT",
            academic_year=academic_year,
            semester=semester,
            status=status,
            course_ids=course_ids,
        )
        db_session.add(registration)
        db_session.commit()
        return registration

    return _make


@pytest.fixture()
def record_attendance(db_session):
    def _record(entry: ClassSchedule, student_id: str = "student-1") -> AttendanceRecord:
        record = AttendanceRecord(
            student_id=student_id,
            course_id=entry.course_id,
            class_schedule_id=entry.id,
            instructor_id=entry.instructor_id,
            attendance_date=date(2024, 9, 16),
            status=AttendanceStatus.present,
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _record


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
