"""create scheduling tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("student", "instructor", "departmentHead", "registrar", "itAdmin", name="user_role")
department_enum = sa.Enum(
    "Freshman",
    "Electrical",
    "Manufacturing",
    "Automotive",
    "Construction",
    "ICT",
    name="department",
)
schedule_status_enum = sa.Enum("active", "retired", name="schedule_status")
registration_status_enum = sa.Enum("registered", "confirmed", "cancelled", "completed", name="registration_status")
attendance_status_enum = sa.Enum("present", "absent", "excused", name="attendance_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("father_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("credit", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_code", "courses", ["code"], unique=True)

    op.create_table(
        "class_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("instructor_id", sa.String(length=36), nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("department", department_enum, nullable=False),
        sa.Column("day_of_week", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", schedule_status_enum, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_class_schedules_course_term", "class_schedules", ["course_id", "academic_year", "semester"]
    )
    op.create_index(
        "ix_class_schedules_instructor_day",
        "class_schedules",
        ["instructor_id", "day_of_week", "academic_year", "semester"],
    )
    op.create_index(
        "ix_class_schedules_room_day",
        "class_schedules",
        ["room_number", "day_of_week", "academic_year", "semester"],
    )
    op.create_index(
        "ix_class_schedules_department_term", "class_schedules", ["department", "academic_year", "semester"]
    )

    op.create_table(
        "registrations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("status", registration_status_enum, nullable=False, server_default="registered"),
        sa.Column("course_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_registrations_student_id", "registrations", ["student_id"])

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("class_schedule_id", sa.String(length=36), nullable=False),
        sa.Column("instructor_id", sa.String(length=36), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_attendance_records_class_schedule_id", "attendance_records", ["class_schedule_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("actor_name", sa.String(length=200), nullable=True),
        sa.Column("actor_role", sa.String(length=50), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("target_model", sa.String(length=100), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=True),
        sa.Column("target_name", sa.String(length=200), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_target_id", "activity_logs", ["target_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_target_id", table_name="activity_logs")
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_table("activity_logs")

    op.drop_index("ix_attendance_records_class_schedule_id", table_name="attendance_records")
    op.drop_table("attendance_records")

    op.drop_index("ix_registrations_student_id", table_name="registrations")
    op.drop_table("registrations")

    op.drop_index("ix_class_schedules_department_term", table_name="class_schedules")
    op.drop_index("ix_class_schedules_room_day", table_name="class_schedules")
    op.drop_index("ix_class_schedules_instructor_day", table_name="class_schedules")
    op.drop_index("ix_class_schedules_course_term", table_name="class_schedules")
    op.drop_table("class_schedules")

    op.drop_index("ix_courses_code", table_name="courses")
    op.drop_table("courses")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        attendance_status_enum,
        registration_status_enum,
        schedule_status_enum,
        department_enum,
        user_role_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
