"""
Derive the turnover cleaning task for a booking.

One booking has at most one CleaningTask. Derivation is idempotent: an existing task is
returned unchanged, and the unique booking_id column catches concurrent inserts.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleanops.errors import Conflict
from cleanops.models.booking import Booking, is_actionable_status
from cleanops.models.property import DEFAULT_CLEANING_MINUTES, Property
from cleanops.models.task import CleaningTask, ChecklistItem, TaskPriority, TaskStatus
from cleanops.services import task_lifecycle
from cleanops.services.auth import SYSTEM_ACTOR
from cleanops.services.timeutil import as_utc

logger = logging.getLogger("uvicorn.error")

CLEANING_OFFSET = timedelta(hours=1)

CHECKLIST_ITEMS = (
    "Clean all bedrooms",
    "Clean bathrooms",
    "Clean kitchen",
    "Clean living room",
    "Wash floors",
    "Clean windows",
    "Change towels and linens",
    "Take out trash",
    "Check appliances",
)


def find_task_for_booking(db: Session, booking_id: int) -> CleaningTask | None:
    return db.query(CleaningTask).filter(CleaningTask.booking_id == booking_id).first()


def scheduled_time_for(booking: Booking, offset: timedelta = CLEANING_OFFSET):
    # Fixed offset after checkout; the next guest's check-in is not considered
    return as_utc(booking.check_out) + offset


def derive_task(
    db: Session,
    booking: Booking,
    offset: timedelta = CLEANING_OFFSET,
    default_minutes: int = DEFAULT_CLEANING_MINUTES,
) -> tuple[CleaningTask, bool]:
    """Ensure exactly one task exists for the booking. Returns (task, created)."""
    existing = find_task_for_booking(db, booking.id)
    if existing is not None:
        return existing, False

    prop = db.get(Property, booking.property_id)
    estimated = (prop.estimated_cleaning_time if prop else None) or default_minutes

    savepoint = db.begin_nested()
    try:
        task = CleaningTask(
            booking_id=booking.id,
            property_id=booking.property_id,
            scheduled_time=scheduled_time_for(booking, offset),
            estimated_duration=estimated,
            status=TaskStatus.pending,
            priority=TaskPriority.normal,
        )
        task.checklist = [
            ChecklistItem(item=label, order_index=i) for i, label in enumerate(CHECKLIST_ITEMS)
        ]
        db.add(task)
        db.flush()
        savepoint.commit()
    except IntegrityError:
        # Another sync created it first
        savepoint.rollback()
        existing = find_task_for_booking(db, booking.id)
        if existing is None:
            raise
        return existing, False

    logger.info("Created cleaning task %s for booking %s", task.id, booking.id)
    return task, True


def derive_tasks_for_bookings(
    db: Session,
    bookings: list[Booking],
    offset: timedelta = CLEANING_OFFSET,
    default_minutes: int = DEFAULT_CLEANING_MINUTES,
) -> int:
    """Derive tasks for every actionable booking. Returns the number created.

    Flushes; commit remains with caller.
    """
    created = 0
    seen = set()
    for booking in bookings:
        if booking.id in seen or not is_actionable_status(booking.booking_status):
            continue
        seen.add(booking.id)
        _, was_created = derive_task(db, booking, offset=offset, default_minutes=default_minutes)
        created += int(was_created)
    return created


def cancel_tasks_for_inactive_bookings(db: Session, bookings: list[Booking]) -> int:
    """Cancel still-open tasks whose booking was cancelled upstream.

    Each cancellation is its own lifecycle transaction, so call this after the sync committed.
    Tasks already in progress are left to the worker.
    """
    cancelled = 0
    for booking in bookings:
        if is_actionable_status(booking.booking_status):
            continue
        task = find_task_for_booking(db, booking.id)
        if task is None or task.status not in (TaskStatus.pending, TaskStatus.assigned):
            continue
        try:
            task_lifecycle.cancel(
                db, task.id, SYSTEM_ACTOR, f"Booking {booking.hostaway_booking_id} is {booking.booking_status}",
            )
            cancelled += 1
        except Conflict as e:
            logger.warning("Could not cancel task %s for booking %s: %s", task.id, booking.id, e.message)
    return cancelled
