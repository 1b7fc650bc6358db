from __future__ import annotations

import logging

from sqlalchemy import inspect

import campus_scheduler.models  # noqa: F401
from campus_scheduler.db.base import Base
from campus_scheduler.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "class_schedules": {
        "id",
        "course_id",
        "instructor_id",
        "academic_year",
        "semester",
        "department",
        "day_of_week",
        "start_time",
        "end_time",
        "room_number",
        "status",
    },
    "users": {"id", "role", "department", "is_active"},
    "courses": {"id", "code", "name", "credit", "department", "year"},
    "registrations": {"id", "student_id", "academic_year", "semester", "status", "course_ids"},
    "attendance_records": {"id", "class_schedule_id"},
    "activity_logs": {"id", "action", "target_id", "details"},
}


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
    logger.info("Database schema ready")
