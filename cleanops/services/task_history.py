"""Append-only task status history. Never update or delete - immutable audit trail."""
from __future__ import annotations

from sqlalchemy.orm import Session

from cleanops.models.task import TaskHistory
from cleanops.services.auth import Actor

# Column limits (match model)
_STATUS_LEN = 50
_ACTOR_TYPE_LEN = 50
_NOTES_LEN = 10_000


def record(
    db: Session,
    task_id: int,
    status: str,
    actor: Actor,
    notes: str | None = None,
) -> TaskHistory:
    """Append one history row in the caller's transaction; commit remains with caller."""
    status_value = getattr(status, "value", status)
    entry = TaskHistory(
        task_id=task_id,
        status=(status_value or "")[:_STATUS_LEN],
        changed_by=actor.user_id,
        changed_by_type=actor.user_type.value[:_ACTOR_TYPE_LEN],
        notes=(notes[:_NOTES_LEN].strip() if notes else None) or None,
    )
    db.add(entry)
    db.flush()
    return entry


def history_for(db: Session, task_id: int) -> list[TaskHistory]:
    return (
        db.query(TaskHistory)
        .filter(TaskHistory.task_id == task_id)
        .order_by(TaskHistory.id)
        .all()
    )
