"""Hourly task reminders for assigned workers (24h and 2h before the cleaning).

Hours until the task are rounded up to a whole hour, so a task is inside the N-hour mark for
the whole hour (N-1, N]. An hourly tick always lands in that window, even when it drifts
off the top of the hour. A TaskReminder row per (task, mark) keeps each reminder to one send,
however many ticks fall inside the window.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleanops.models.property import Property
from cleanops.models.task import CleaningTask, TaskReminder, TaskStatus
from cleanops.models.user import UserType
from cleanops.services.notifications import NotificationDispatcher, TYPE_TASK_REMINDER
from cleanops.services.timeutil import as_utc, utcnow

logger = logging.getLogger("uvicorn.error")

DEFAULT_MARKS = (24, 2)


def hours_until(scheduled: datetime, now: datetime) -> int:
    return math.ceil((as_utc(scheduled) - now).total_seconds() / 3600)


def _already_sent(db: Session, task_id: int, mark: int) -> bool:
    return (
        db.query(TaskReminder)
        .filter(TaskReminder.task_id == task_id, TaskReminder.hours_before == mark)
        .first()
        is not None
    )


def get_due_reminders(db: Session, now: datetime, marks=DEFAULT_MARKS) -> list[tuple[CleaningTask, int]]:
    """Assigned tasks scheduled within the largest mark whose rounded-up hours hit a mark."""
    horizon = now + timedelta(hours=max(marks))
    tasks = (
        db.query(CleaningTask)
        .filter(
            CleaningTask.status == TaskStatus.assigned,
            CleaningTask.worker_id.isnot(None),
            CleaningTask.scheduled_time > now,
            CleaningTask.scheduled_time <= horizon,
        )
        .order_by(CleaningTask.scheduled_time)
        .all()
    )
    due = []
    for task in tasks:
        mark = hours_until(task.scheduled_time, now)
        if mark in marks and not _already_sent(db, task.id, mark):
            due.append((task, mark))
    return due


def send_task_reminders(
    db: Session,
    dispatcher: NotificationDispatcher,
    now: datetime | None = None,
    marks=DEFAULT_MARKS,
) -> int:
    """Send due reminders; each is committed together with its sent-mark. Returns count sent."""
    now = as_utc(now) if now else utcnow()
    sent = 0
    for task, mark in get_due_reminders(db, now, marks):
        prop = db.get(Property, task.property_id)
        property_name = (prop.name if prop else None) or "the property"
        try:
            db.add(TaskReminder(task_id=task.id, hours_before=mark, sent_at=now))
            db.flush()
            dispatcher.enqueue(
                db,
                TYPE_TASK_REMINDER,
                task.worker_id,
                UserType.worker.value,
                {
                    "title": "Cleaning task reminder",
                    "body": f"You have a cleaning task at {property_name} in {mark} hours",
                    "taskId": task.id,
                    "hoursBefore": mark,
                    "scheduledTime": as_utc(task.scheduled_time).isoformat(),
                    "urgent": mark <= 2,
                },
            )
            db.commit()
            sent += 1
        except IntegrityError:
            # A concurrent tick already recorded this mark
            db.rollback()
            logger.info("Reminder for task %s at %sh already sent", task.id, mark)
    if sent:
        logger.info("Task reminders: sent %d reminder(s)", sent)
    return sent
