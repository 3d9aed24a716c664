"""Cleaning tasks: listing for admins and workers, lifecycle transitions, checklist."""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cleanops.dependencies import get_current_actor, get_db, get_dispatcher, require_admin, require_worker
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.models.task import CleaningTask, TaskStatus
from cleanops.models.user import UserType, Worker
from cleanops.schemas.task import (
    AssignTaskRequest,
    CancelTaskRequest,
    ChecklistItemResponse,
    ChecklistItemUpdate,
    CompleteTaskRequest,
    TaskDetailResponse,
    TaskHistoryResponse,
    TaskResponse,
)
from cleanops.services import task_history, task_lifecycle
from cleanops.services.auth import Actor
from cleanops.services.notifications import NotificationDispatcher, TYPE_TASK_ASSIGNED
from cleanops.services.timeutil import as_utc

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _visible_task(db: Session, task_id: int, actor: Actor) -> CleaningTask:
    task = task_lifecycle.get_task(db, task_id)
    # Workers only see their own tasks; hide the rest as not found
    if actor.is_worker and task.worker_id != actor.user_id:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _detail(db: Session, task: CleaningTask) -> TaskDetailResponse:
    out = TaskDetailResponse.model_validate(task)
    prop = db.get(Property, task.property_id)
    booking = db.get(Booking, task.booking_id)
    worker = db.get(Worker, task.worker_id) if task.worker_id else None
    if prop:
        out.property_name = prop.name
        out.address = prop.address
        out.access_instructions = prop.access_instructions
    if booking:
        out.guest_name = booking.guest_name
        out.check_in = booking.check_in
        out.check_out = booking.check_out
    if worker:
        out.worker_name = worker.name
    return out


@router.get("", response_model=list[TaskResponse])
def list_tasks(
    status: TaskStatus | None = None,
    worker_id: int | None = None,
    property_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    if actor.is_worker:
        worker_id = actor.user_id
    return task_lifecycle.list_tasks(
        db,
        status=status,
        worker_id=worker_id,
        property_id=property_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{task_id}", response_model=TaskDetailResponse)
def get_task(task_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return _detail(db, _visible_task(db, task_id, actor))


@router.get("/{task_id}/history", response_model=list[TaskHistoryResponse])
def get_task_history(task_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    _visible_task(db, task_id, actor)
    return task_history.history_for(db, task_id)


@router.post("/{task_id}/assign", response_model=TaskResponse)
def assign_task(
    task_id: int,
    data: AssignTaskRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    actor: Actor = Depends(require_admin),
):
    task = task_lifecycle.assign(db, task_id, data.worker_id, actor)
    prop = db.get(Property, task.property_id)
    scheduled = as_utc(task.scheduled_time)
    dispatcher.enqueue(
        db,
        TYPE_TASK_ASSIGNED,
        data.worker_id,
        UserType.worker.value,
        {
            "title": "New cleaning task",
            "body": f"You have been assigned a cleaning at {prop.name if prop else 'a property'} on {scheduled:%Y-%m-%d %H:%M} UTC",
            "taskId": task.id,
            "scheduledTime": scheduled.isoformat(),
        },
    )
    db.commit()
    return task


@router.post("/{task_id}/start", response_model=TaskResponse)
def start_task(task_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_worker)):
    return task_lifecycle.start(db, task_id, actor.user_id)


@router.post("/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: int,
    data: CompleteTaskRequest | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_worker),
):
    notes = data.worker_notes if data else None
    return task_lifecycle.complete(db, task_id, actor.user_id, notes=notes)


@router.post("/{task_id}/cancel", response_model=TaskResponse)
def cancel_task(
    task_id: int,
    data: CancelTaskRequest | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    return task_lifecycle.cancel(db, task_id, actor, reason=data.reason if data else None)


@router.patch("/{task_id}/checklist/{item_id}", response_model=ChecklistItemResponse)
def update_checklist_item(
    task_id: int,
    item_id: int,
    data: ChecklistItemUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    _visible_task(db, task_id, actor)
    return task_lifecycle.update_checklist_item(db, task_id, item_id, data.completed)
