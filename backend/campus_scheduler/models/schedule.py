import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_scheduler.db.base import Base


def _enum_values(members) -> list[str]:
    return [item.value for item in members]


class Department(str, Enum):
    freshman = "Freshman"
    electrical = "Electrical"
    manufacturing = "Manufacturing"
    automotive = "Automotive"
    construction = "Construction"
    ict = "ICT"


class ScheduleStatus(str, Enum):
    active = "active"
    # Terminal: attendance history depends on the entry, so it is never deleted or reactivated.
    retired = "retired"


class ClassSchedule(Base):
    __tablename__ = "class_schedules"
    __table_args__ = (
        Index("ix_class_schedules_course_term", "course_id", "academic_year", "semester"),
        Index("ix_class_schedules_instructor_day", "instructor_id", "day_of_week", "academic_year", "semester"),
        Index("ix_class_schedules_room_day", "room_number", "day_of_week", "academic_year", "semester"),
        Index("ix_class_schedules_department_term", "department", "academic_year", "semester"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id: Mapped[str] = mapped_column(String(36), nullable=False)
    instructor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    department: Mapped[Department] = mapped_column(
        SAEnum(Department, name="department", values_callable=_enum_values),
        nullable=False,
    )
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    room_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ScheduleStatus] = mapped_column(
        SAEnum(ScheduleStatus, name="schedule_status"),
        nullable=False,
        default=ScheduleStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == ScheduleStatus.active

    def retire(self) -> None:
        self.status = ScheduleStatus.retired

    @property
    def time_label(self) -> str:
        return f"{self.start_time} - {self.end_time}"
