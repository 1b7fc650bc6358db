from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from campus_scheduler.api.deps import get_current_user, get_db, require_roles
from campus_scheduler.core.exceptions import SchedulingValidationError
from campus_scheduler.models.schedule import Department
from campus_scheduler.models.user import User, UserRole
from campus_scheduler.schemas.schedule import (
    CourseScheduleOut,
    DeleteOutcomeOut,
    DepartmentScheduleOut,
    InstructorAvailabilityOut,
    InstructorOut,
    InstructorScheduleOut,
    RoomAvailabilityOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    SessionLookupOut,
    StudentScheduleOut,
)
from campus_scheduler.schemas.statistics import ScheduleStatsOut
from campus_scheduler.services.audit import log_activity
from campus_scheduler.services.availability import AvailabilityResolver
from campus_scheduler.services.collaborators import (
    SqlAttendanceLedger,
    SqlCourseDirectory,
    SqlEnrollmentDirectory,
    SqlInstructorRoster,
)
from campus_scheduler.services.conflict_service import ConflictService
from campus_scheduler.services.lifecycle import ScheduleLifecycleManager, schedule_snapshot
from campus_scheduler.services.projections import ScheduleProjections
from campus_scheduler.services.schedule_store import ScheduleStore
from campus_scheduler.services.statistics import ScheduleStatistics
from campus_scheduler.services.terms import resolve_term

router = APIRouter()

SCHEDULER_ROLES = (UserRole.department_head, UserRole.registrar)


def _lifecycle(db: Session) -> ScheduleLifecycleManager:
    store = ScheduleStore(db)
    return ScheduleLifecycleManager(
        store,
        ConflictService(store),
        SqlAttendanceLedger(db),
        courses=SqlCourseDirectory(db),
        roster=SqlInstructorRoster(db),
    )


def _availability(db: Session) -> AvailabilityResolver:
    store = ScheduleStore(db)
    return AvailabilityResolver(store, ConflictService(store), SqlInstructorRoster(db))


def _projections(db: Session) -> ScheduleProjections:
    return ScheduleProjections(
        ScheduleStore(db),
        SqlCourseDirectory(db),
        SqlInstructorRoster(db),
        SqlEnrollmentDirectory(db),
    )


@router.post("/create", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    entry = _lifecycle(db).create(payload, created_by=current_user.id)
    log_activity(
        db,
        actor=current_user,
        action="SCHEDULE_CREATED",
        target_id=entry.id,
        target_name=f"{entry.course_id} {entry.day_of_week} {entry.time_label}",
        details={"after": schedule_snapshot(entry)},
    )
    db.commit()
    return ScheduleOut.from_entry(entry)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    existing = ScheduleStore(db).get(schedule_id)
    before = schedule_snapshot(existing) if existing is not None else None

    entry = _lifecycle(db).update(schedule_id, payload)
    log_activity(
        db,
        actor=current_user,
        action="SCHEDULE_UPDATED",
        target_id=entry.id,
        target_name=f"{entry.course_id} {entry.day_of_week} {entry.time_label}",
        details={"before": before, "after": schedule_snapshot(entry)},
    )
    db.commit()
    return ScheduleOut.from_entry(entry)


@router.delete("/{schedule_id}", response_model=DeleteOutcomeOut)
def delete_schedule(
    schedule_id: str,
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> DeleteOutcomeOut:
    outcome = _lifecycle(db).delete(schedule_id)
    snapshot = outcome.snapshot
    log_activity(
        db,
        actor=current_user,
        action="SCHEDULE_DEACTIVATED" if outcome.deactivated else "SCHEDULE_DELETED",
        target_id=outcome.schedule_id,
        target_name=f"{snapshot['courseId']} {snapshot['dayOfWeek']} {snapshot['startTime']} - {snapshot['endTime']}",
        details={"before": snapshot, "attendanceCount": outcome.attendance_count},
    )
    db.commit()

    if outcome.deactivated:
        message = (
            f"Schedule deactivated instead of deleted: {outcome.attendance_count} attendance record(s) reference it"
        )
    else:
        message = "Schedule deleted successfully"
    return DeleteOutcomeOut(
        deleted=outcome.deleted,
        deactivated=outcome.deactivated,
        attendance_count=outcome.attendance_count,
        message=message,
    )


@router.get("/available-instructors", response_model=InstructorAvailabilityOut)
def get_available_instructors(
    day_of_week: str = Query(alias="dayOfWeek"),
    start_time: str = Query(alias="startTime"),
    end_time: str = Query(alias="endTime"),
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    department: Department | None = Query(default=None),
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> InstructorAvailabilityOut:
    academic_year, semester = resolve_term(academic_year, semester)
    result = _availability(db).instructors(
        day_of_week,
        start_time,
        end_time,
        academic_year,
        semester,
        department=department.value if department else None,
    )
    return InstructorAvailabilityOut(
        available_instructors=[
            InstructorOut(id=item.id, name=item.name, email=item.email, department=item.department)
            for item in result.available
        ],
        total_available=len(result.available),
        total_instructors=result.total,
        busy_instructors=len(result.busy),
    )


@router.get("/available-rooms", response_model=RoomAvailabilityOut)
def get_available_rooms(
    day_of_week: str = Query(alias="dayOfWeek"),
    start_time: str = Query(alias="startTime"),
    end_time: str = Query(alias="endTime"),
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> RoomAvailabilityOut:
    academic_year, semester = resolve_term(academic_year, semester)
    result = _availability(db).rooms(day_of_week, start_time, end_time, academic_year, semester)
    return RoomAvailabilityOut(
        available_rooms=result.available,
        total_available=len(result.available),
        total_rooms=result.total,
        busy_rooms=result.busy,
    )


@router.get("/department", response_model=DepartmentScheduleOut)
def get_department_schedule(
    department: Department | None = Query(default=None),
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> DepartmentScheduleOut:
    # Department heads default to their own department.
    department_value = department.value if department else current_user.department
    if not department_value:
        raise SchedulingValidationError("Department is required", details={"field": "department"})
    try:
        department_value = Department(department_value).value
    except ValueError as exc:
        raise SchedulingValidationError(
            "Invalid department value",
            details={"department": department_value},
        ) from exc

    academic_year, semester = resolve_term(academic_year, semester)
    return _projections(db).for_department(department_value, academic_year, semester)


@router.get("/student", response_model=StudentScheduleOut)
def get_student_schedule(
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    current_user: User = Depends(require_roles(UserRole.student)),
    db: Session = Depends(get_db),
) -> StudentScheduleOut:
    academic_year, semester = resolve_term(academic_year, semester)
    return _projections(db).for_student(current_user.id, academic_year, semester)


@router.get("/instructor", response_model=InstructorScheduleOut)
def get_instructor_schedule(
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    current_user: User = Depends(require_roles(UserRole.instructor)),
    db: Session = Depends(get_db),
) -> InstructorScheduleOut:
    academic_year, semester = resolve_term(academic_year, semester)
    return _projections(db).for_instructor(current_user.id, academic_year, semester)


@router.get("/course/{course_id}", response_model=CourseScheduleOut)
def get_course_schedule(
    course_id: str,
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CourseScheduleOut:
    academic_year, semester = resolve_term(academic_year, semester)
    return _projections(db).for_course(course_id, academic_year, semester)


@router.get("/session", response_model=SessionLookupOut)
def get_session_for_date(
    course_id: str = Query(alias="courseId"),
    on_date: date = Query(alias="date"),
    instructor_id: str | None = Query(default=None, alias="instructorId"),
    current_user: User = Depends(require_roles(UserRole.instructor, *SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> SessionLookupOut:
    if instructor_id is None:
        if current_user.role != UserRole.instructor:
            raise SchedulingValidationError("instructorId is required", details={"field": "instructorId"})
        instructor_id = current_user.id
    return _projections(db).session_for_date(course_id, instructor_id, on_date)


@router.get("/stats", response_model=ScheduleStatsOut)
def get_schedule_stats(
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None, ge=1, le=2),
    department: Department | None = Query(default=None),
    current_user: User = Depends(require_roles(*SCHEDULER_ROLES)),
    db: Session = Depends(get_db),
) -> ScheduleStatsOut:
    academic_year, semester = resolve_term(academic_year, semester)
    statistics = ScheduleStatistics(ScheduleStore(db), SqlInstructorRoster(db))
    return statistics.compute(academic_year, semester, department=department.value if department else None)
