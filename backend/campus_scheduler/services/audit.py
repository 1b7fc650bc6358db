from __future__ import annotations

from sqlalchemy.orm import Session

from campus_scheduler.models.activity_log import ActivityLog
from campus_scheduler.models.user import User


def log_activity(
    db: Session,
    *,
    actor: User | None,
    action: str,
    target_id: str | None = None,
    target_name: str | None = None,
    details: dict | None = None,
) -> ActivityLog:
    record = ActivityLog(
        actor_id=actor.id if actor is not None else None,
        actor_name=actor.full_name if actor is not None else None,
        actor_role=actor.role.value if actor is not None else None,
        action=action,
        target_model="ClassSchedule",
        target_id=target_id,
        target_name=target_name,
        details=details or {},
    )
    db.add(record)
    return record
