import threading

import pytest

from campus_scheduler.core.exceptions import (
    ResourceNotFoundError,
    SchedulingConflictError,
    SchedulingValidationError,
)
from campus_scheduler.models.schedule import ScheduleStatus
from campus_scheduler.models.user import UserRole
from campus_scheduler.schemas.schedule import ScheduleCreate, ScheduleUpdate
from campus_scheduler.services.lifecycle import TermScopeLocks

ACADEMIC_YEAR = "2024-2025"


@pytest.fixture()
def cs101(make_course):
    return make_course("CS101", "Introduction to Computing")


@pytest.fixture()
def cs102(make_course):
    return make_course("CS102", "Programming Fundamentals")


@pytest.fixture()
def instructor(make_user):
    return make_user(first_name="Ida", department="ICT")


def create_payload(course_id: str, instructor_id: str, **overrides) -> ScheduleCreate:
    values = {
        "courseId": course_id,
        "instructorId": instructor_id,
        "academicYear": ACADEMIC_YEAR,
        "semester": 1,
        "department": "ICT",
        "dayOfWeek": "Monday",
        "startTime": "08:00",
        "endTime": "09:00",
    }
    values.update(overrides)
    return ScheduleCreate.model_validate(values)


def test_overlapping_instructor_booking_is_rejected(lifecycle, cs101, cs102, instructor):
    first = lifecycle.create(
        create_payload(cs101.id, instructor.id, startTime="08:00", endTime="09:30", roomNumber="R1"),
        created_by="registrar-1",
    )
    assert first.is_active
    assert first.status == ScheduleStatus.active

    with pytest.raises(SchedulingConflictError) as excinfo:
        lifecycle.create(
            create_payload(cs102.id, instructor.id, startTime="09:00", endTime="10:00", roomNumber="R2"),
            created_by="registrar-1",
        )

    details = excinfo.value.details
    assert excinfo.value.status_code == 409
    assert details["instructorConflicts"] is True
    assert details["roomConflicts"] is False
    assert [item["id"] for item in details["details"]["instructorConflicts"]] == [first.id]


def test_back_to_back_classes_are_allowed(lifecycle, cs101, cs102, instructor):
    lifecycle.create(create_payload(cs101.id, instructor.id, roomNumber="R1"), created_by="registrar-1")

    second = lifecycle.create(
        create_payload(cs102.id, instructor.id, startTime="09:00", endTime="10:00", roomNumber="R1"),
        created_by="registrar-1",
    )

    assert second.start_time == "09:00"


def test_same_time_on_another_day_is_allowed(lifecycle, cs101, cs102, instructor):
    lifecycle.create(create_payload(cs101.id, instructor.id, startTime="08:00", endTime="10:00"), created_by="r")

    tuesday = lifecycle.create(
        create_payload(cs102.id, instructor.id, dayOfWeek="Tuesday", startTime="08:00", endTime="10:00"),
        created_by="r",
    )

    assert tuesday.day_of_week == "Tuesday"


def test_entries_without_room_never_clash_on_room(lifecycle, cs101, cs102, make_user):
    first_instructor = make_user(first_name="Ida")
    second_instructor = make_user(first_name="Jonas")
    lifecycle.create(create_payload(cs101.id, first_instructor.id, roomNumber="   "), created_by="r")

    second = lifecycle.create(create_payload(cs102.id, second_instructor.id), created_by="r")

    assert second.room_number is None


def test_room_double_booking_is_rejected(lifecycle, cs101, cs102, make_user):
    first_instructor = make_user(first_name="Ida")
    second_instructor = make_user(first_name="Jonas")
    lifecycle.create(create_payload(cs101.id, first_instructor.id, roomNumber="R1"), created_by="r")

    with pytest.raises(SchedulingConflictError) as excinfo:
        lifecycle.create(create_payload(cs102.id, second_instructor.id, roomNumber="R1"), created_by="r")

    assert excinfo.value.details["roomConflicts"] is True
    assert excinfo.value.details["instructorConflicts"] is False


def test_unknown_course_or_non_instructor_is_not_found(lifecycle, cs101, instructor, make_user):
    student = make_user(first_name="Sara", role=UserRole.student)

    with pytest.raises(ResourceNotFoundError) as excinfo:
        lifecycle.create(create_payload("missing-course", instructor.id), created_by="r")
    assert excinfo.value.resource_type == "Course"

    with pytest.raises(ResourceNotFoundError) as excinfo:
        lifecycle.create(create_payload(cs101.id, student.id), created_by="r")
    assert excinfo.value.resource_type == "Instructor"


def test_updating_notes_never_conflicts_with_itself(lifecycle, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id, roomNumber="R1"), created_by="r")

    updated = lifecycle.update(entry.id, ScheduleUpdate(notes="  Bring lab coats  "))

    assert updated.notes == "Bring lab coats"
    assert updated.start_time == "08:00"


def test_update_resubmitting_same_placement_is_not_a_conflict(lifecycle, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id, roomNumber="R1"), created_by="r")

    updated = lifecycle.update(
        entry.id,
        ScheduleUpdate(day_of_week="Monday", start_time="08:00", end_time="09:00", room_number="R1"),
    )

    assert updated.id == entry.id


def test_extending_own_slot_excludes_self(lifecycle, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id, roomNumber="R1"), created_by="r")

    updated = lifecycle.update(entry.id, ScheduleUpdate(end_time="09:45"))

    assert updated.end_time == "09:45"


def test_moving_into_an_occupied_slot_is_rejected(lifecycle, store, cs101, cs102, instructor):
    lifecycle.create(create_payload(cs101.id, instructor.id, startTime="10:00", endTime="11:00"), created_by="r")
    entry = lifecycle.create(create_payload(cs102.id, instructor.id), created_by="r")

    with pytest.raises(SchedulingConflictError):
        lifecycle.update(entry.id, ScheduleUpdate(start_time="10:30", end_time="11:30"))

    store.db.expire_all()
    unchanged = store.get(entry.id)
    assert (unchanged.start_time, unchanged.end_time) == ("08:00", "09:00")


def test_update_rejects_inverted_merged_times(lifecycle, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id), created_by="r")

    with pytest.raises(SchedulingValidationError, match="End time must be after start time"):
        lifecycle.update(entry.id, ScheduleUpdate(start_time="09:30"))


def test_update_rejects_clearing_required_field(lifecycle, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id), created_by="r")

    with pytest.raises(SchedulingValidationError):
        lifecycle.update(entry.id, ScheduleUpdate(instructor_id=None))


def test_update_missing_entry_is_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        lifecycle.update("missing", ScheduleUpdate(notes="x"))


def test_delete_without_attendance_removes_entry(lifecycle, store, cs101, instructor):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id), created_by="r")
    entry_id = entry.id

    outcome = lifecycle.delete(entry_id)

    assert outcome.deleted is True
    assert outcome.deactivated is False
    assert outcome.snapshot["courseId"] == cs101.id
    assert store.get(entry_id) is None
    assert store.list_active(ACADEMIC_YEAR, 1) == []


def test_delete_with_attendance_retires_entry(lifecycle, store, cs101, cs102, instructor, record_attendance):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id, roomNumber="R1"), created_by="r")
    record_attendance(entry, student_id="s1")
    record_attendance(entry, student_id="s2")

    outcome = lifecycle.delete(entry.id)

    assert outcome.deleted is False
    assert outcome.deactivated is True
    assert outcome.attendance_count == 2
    retired = store.get(entry.id)
    assert retired is not None
    assert retired.status == ScheduleStatus.retired
    assert not retired.is_active
    assert store.list_active(ACADEMIC_YEAR, 1) == []

    # The retired slot no longer blocks new bookings.
    replacement = lifecycle.create(create_payload(cs102.id, instructor.id, roomNumber="R1"), created_by="r")
    assert replacement.is_active


def test_retired_entries_are_terminal(lifecycle, store, cs101, instructor, record_attendance):
    entry = lifecycle.create(create_payload(cs101.id, instructor.id), created_by="r")
    record_attendance(entry)
    lifecycle.delete(entry.id)

    with pytest.raises(SchedulingValidationError, match="Retired schedules cannot be modified"):
        lifecycle.update(entry.id, ScheduleUpdate(notes="reopen"))

    again = lifecycle.delete(entry.id)
    assert again.deactivated is True
    assert store.get(entry.id).status == ScheduleStatus.retired


def test_delete_missing_entry_is_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        lifecycle.delete("missing")


def _enter(locks: TermScopeLocks, department: str, order: list[str]) -> None:
    with locks.hold(ACADEMIC_YEAR, 1, department):
        order.append(department)


def test_term_scope_lock_serializes_writers_in_same_scope():
    locks = TermScopeLocks()
    order: list[str] = []

    with locks.hold(ACADEMIC_YEAR, 1, "ICT"):
        same_scope = threading.Thread(target=_enter, args=(locks, "ICT", order))
        other_scope = threading.Thread(target=_enter, args=(locks, "Electrical", order))
        same_scope.start()
        other_scope.start()
        other_scope.join(timeout=1)
        same_scope.join(timeout=0.1)
        assert same_scope.is_alive()
        order.append("holder")

    same_scope.join(timeout=1)
    assert order == ["Electrical", "holder", "ICT"]
