import pytest

from campus_scheduler.core.exceptions import SchedulingValidationError
from campus_scheduler.models.schedule import Department, ScheduleStatus
from campus_scheduler.models.user import UserRole
from campus_scheduler.services.availability import AvailabilityResolver
from campus_scheduler.services.conflict_service import ConflictService

ACADEMIC_YEAR = "2024-2025"


@pytest.fixture()
def resolver(store, roster):
    return AvailabilityResolver(store, ConflictService(store), roster)


def test_available_and_busy_instructors_partition_the_roster(resolver, make_user, make_entry):
    alem = make_user(first_name="Alem", department="ICT")
    bekele = make_user(first_name="Bekele", department="ICT")
    chaltu = make_user(first_name="Chaltu", department="Electrical")
    make_user(first_name="Dawit", is_active=False)
    make_user(first_name="Eden", role=UserRole.student)

    make_entry("course-1", alem.id, start_time="08:00", end_time="10:00")
    make_entry("course-2", chaltu.id, start_time="09:30", end_time="11:00", department=Department.electrical)
    make_entry("course-3", bekele.id, start_time="10:00", end_time="11:00")

    result = resolver.instructors("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1)
    available = {item.id for item in result.available}
    busy = resolver.busy_instructor_ids("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1)

    assert available == {bekele.id}
    assert busy == {alem.id, chaltu.id}
    assert available.isdisjoint(busy)
    assert available | busy == {item.id for item in resolver.roster.list_instructors()}
    assert result.total == 3


def test_department_filter_keeps_unassigned_instructors(resolver, make_user):
    ict = make_user(first_name="Alem", department="ICT")
    make_user(first_name="Bekele", department="Electrical")
    floating = make_user(first_name="Chaltu", department=None)

    available = resolver.available_instructors("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1, department="ICT")

    assert [item.id for item in available] == [ict.id, floating.id]


def test_other_terms_and_retired_entries_do_not_make_instructors_busy(resolver, make_user, make_entry):
    alem = make_user(first_name="Alem")
    make_entry("course-1", alem.id, start_time="09:00", end_time="10:00", semester=2)
    make_entry("course-2", alem.id, start_time="09:00", end_time="10:00", status=ScheduleStatus.retired)

    available = resolver.available_instructors("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1)

    assert [item.id for item in available] == [alem.id]


def test_fully_booked_slot_returns_empty_list(resolver, make_user, make_entry):
    alem = make_user(first_name="Alem")
    make_entry("course-1", alem.id, start_time="09:00", end_time="10:00")

    assert resolver.available_instructors("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1) == []


def test_rooms_are_known_rooms_minus_busy_rooms(resolver, make_entry):
    make_entry("course-1", "i1", start_time="09:00", end_time="10:00", room_number="R1")
    make_entry("course-2", "i2", start_time="13:00", end_time="14:00", room_number="R2")
    make_entry("course-3", "i3", start_time="09:00", end_time="10:00", room_number="R3", semester=2)
    make_entry("course-4", "i4", start_time="09:00", end_time="10:00", room_number="R4", status=ScheduleStatus.retired)
    make_entry("course-5", "i5", start_time="09:00", end_time="10:00", room_number=None)

    result = resolver.rooms("Monday", "09:30", "10:30", ACADEMIC_YEAR, 1)

    assert result.available == ["R2", "R3", "R4"]
    assert result.busy == ["R1"]
    assert result.total == 4


def test_no_known_rooms_returns_empty_list(resolver, make_entry):
    make_entry("course-1", "i1", room_number=None)

    assert resolver.available_rooms("Monday", "09:00", "10:00", ACADEMIC_YEAR, 1) == []


def test_invalid_slot_is_rejected(resolver):
    with pytest.raises(SchedulingValidationError):
        resolver.available_rooms("Monday", "10:00", "09:00", ACADEMIC_YEAR, 1)
    with pytest.raises(SchedulingValidationError):
        resolver.available_instructors("Monday", "9am", "10:00", ACADEMIC_YEAR, 1)
