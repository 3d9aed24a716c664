"""
Cleaning task lifecycle: pending -> assigned -> in_progress -> completed, with cancelled
reachable from every non-terminal state.

All transitions go through one table (TRANSITIONS) and one guarded write: a conditional
UPDATE ... WHERE status IN (allowed sources) [AND worker_id = owner]. If no row matches, the
precondition no longer holds (another request won the race, wrong worker, or wrong state) and
the call fails with NotFound / Forbidden / Conflict without touching the task.
Every successful transition appends a TaskHistory row in the same transaction.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.orm import Session

from cleanops.errors import Conflict, Forbidden, NotFound
from cleanops.models.task import CleaningTask, ChecklistItem, TaskStatus
from cleanops.models.user import UserStatus, UserType, Worker
from cleanops.services import task_history
from cleanops.services.auth import Actor
from cleanops.services.timeutil import as_utc, utcnow

logger = logging.getLogger("uvicorn.error")

TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.pending: frozenset({TaskStatus.assigned, TaskStatus.cancelled}),
    # assigned -> assigned is a re-assignment; only allowed before work starts
    TaskStatus.assigned: frozenset({TaskStatus.assigned, TaskStatus.in_progress, TaskStatus.cancelled}),
    TaskStatus.in_progress: frozenset({TaskStatus.completed, TaskStatus.cancelled}),
    TaskStatus.completed: frozenset(),
    TaskStatus.cancelled: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
ACTIVE_STATUSES = (TaskStatus.assigned, TaskStatus.in_progress)


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    return target in TRANSITIONS[TaskStatus(current)]


def check_transition(current: TaskStatus, target: TaskStatus) -> None:
    if not can_transition(current, target):
        raise Conflict(f"Task cannot move from {TaskStatus(current).value} to {target.value}")


def allowed_sources(target: TaskStatus) -> list[TaskStatus]:
    return [s for s, targets in TRANSITIONS.items() if target in targets]


def worker_actor(worker_id: int) -> Actor:
    return Actor(user_id=worker_id, user_type=UserType.worker, role="worker")


@contextmanager
def _transaction(db: Session):
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def _load(db: Session, task_id: int) -> CleaningTask | None:
    return (
        db.query(CleaningTask)
        .populate_existing()
        .filter(CleaningTask.id == task_id)
        .first()
    )


def get_task(db: Session, task_id: int) -> CleaningTask:
    task = _load(db, task_id)
    if task is None:
        raise NotFound(f"Task {task_id} not found")
    return task


def _raise_rejected(db: Session, task_id: int, target: TaskStatus, owner_id: int | None) -> None:
    task = _load(db, task_id)
    if task is None:
        raise NotFound(f"Task {task_id} not found")
    if owner_id is not None and task.worker_id != owner_id:
        raise Forbidden(f"Task {task_id} is not assigned to worker {owner_id}")
    check_transition(task.status, target)
    # Preconditions hold now, so the row changed between our write and this read
    raise Conflict(f"Task {task_id} was modified concurrently; reload and retry")


def _guarded_update(
    db: Session,
    task_id: int,
    target: TaskStatus,
    values: dict | None = None,
    owner_id: int | None = None,
) -> CleaningTask:
    q = db.query(CleaningTask).filter(
        CleaningTask.id == task_id,
        CleaningTask.status.in_(allowed_sources(target)),
    )
    if owner_id is not None:
        q = q.filter(CleaningTask.worker_id == owner_id)
    changes = {CleaningTask.status: target}
    changes.update(values or {})
    updated = q.update(changes, synchronize_session=False)
    if updated != 1:
        _raise_rejected(db, task_id, target, owner_id)
    return _load(db, task_id)


def assign(db: Session, task_id: int, worker_id: int, actor: Actor) -> CleaningTask:
    """Claim a task for an active worker. Re-assigning is allowed until the task is started."""
    with _transaction(db):
        worker = (
            db.query(Worker)
            .filter(Worker.id == worker_id, Worker.status == UserStatus.active.value)
            .first()
        )
        if worker is None:
            raise NotFound(f"Worker {worker_id} not found or inactive")
        task = _guarded_update(db, task_id, TaskStatus.assigned, {CleaningTask.worker_id: worker_id})
        task_history.record(db, task_id, TaskStatus.assigned, actor, f"Assigned to {worker.name}")
    logger.info("Task %s assigned to worker %s by %s %s", task_id, worker_id, actor.user_type.value, actor.user_id)
    return task


def start(db: Session, task_id: int, worker_id: int, now: datetime | None = None) -> CleaningTask:
    now = now or utcnow()
    with _transaction(db):
        task = _guarded_update(
            db, task_id, TaskStatus.in_progress, {CleaningTask.started_at: now}, owner_id=worker_id,
        )
        task_history.record(db, task_id, TaskStatus.in_progress, worker_actor(worker_id), "Started")
    logger.info("Task %s started by worker %s", task_id, worker_id)
    return task


def complete(
    db: Session,
    task_id: int,
    worker_id: int,
    notes: str | None = None,
    now: datetime | None = None,
) -> CleaningTask:
    """Finish a task and bump the worker's counters in the same transaction."""
    now = now or utcnow()
    with _transaction(db):
        current = get_task(db, task_id)
        started_at = as_utc(current.started_at)
        actual_duration = (
            int(round((now - started_at).total_seconds() / 60)) if started_at else None
        )
        worker_notes = current.worker_notes
        if notes and notes.strip():
            worker_notes = f"{worker_notes}\n{notes.strip()}" if worker_notes else notes.strip()

        task = _guarded_update(
            db,
            task_id,
            TaskStatus.completed,
            {
                CleaningTask.completed_at: now,
                CleaningTask.actual_duration: actual_duration,
                CleaningTask.worker_notes: worker_notes,
            },
            owner_id=worker_id,
        )
        db.query(Worker).filter(Worker.id == worker_id).update(
            {
                Worker.total_tasks: Worker.total_tasks + 1,
                Worker.completed_tasks: Worker.completed_tasks + 1,
            },
            synchronize_session=False,
        )
        task_history.record(db, task_id, TaskStatus.completed, worker_actor(worker_id), notes)
    logger.info("Task %s completed by worker %s in %s min", task_id, worker_id, actual_duration)
    return task


def cancel(db: Session, task_id: int, actor: Actor, reason: str | None = None) -> CleaningTask:
    with _transaction(db):
        task = _guarded_update(db, task_id, TaskStatus.cancelled)
        task_history.record(db, task_id, TaskStatus.cancelled, actor, reason or "Cancelled")
    logger.info("Task %s cancelled by %s %s", task_id, actor.user_type.value, actor.user_id)
    return task


def update_checklist_item(
    db: Session,
    task_id: int,
    item_id: int,
    completed: bool,
    now: datetime | None = None,
) -> ChecklistItem:
    """Toggle one checklist item. Never changes the task's status."""
    with _transaction(db):
        item = (
            db.query(ChecklistItem)
            .filter(ChecklistItem.id == item_id, ChecklistItem.task_id == task_id)
            .first()
        )
        if item is None:
            raise NotFound(f"Checklist item {item_id} not found on task {task_id}")
        item.completed = bool(completed)
        item.completed_at = (now or utcnow()) if completed else None
    return item


def list_tasks(
    db: Session,
    status: TaskStatus | None = None,
    worker_id: int | None = None,
    property_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[CleaningTask]:
    q = db.query(CleaningTask)
    if status is not None:
        q = q.filter(CleaningTask.status == status)
    if worker_id is not None:
        q = q.filter(CleaningTask.worker_id == worker_id)
    if property_id is not None:
        q = q.filter(CleaningTask.property_id == property_id)
    if start_date is not None:
        q = q.filter(CleaningTask.scheduled_time >= start_date)
    if end_date is not None:
        q = q.filter(CleaningTask.scheduled_time <= end_date)
    return q.order_by(CleaningTask.scheduled_time.asc()).all()
