"""Cleaning task schemas."""
from datetime import datetime
from pydantic import BaseModel, Field

from cleanops.models.task import TaskPriority, TaskStatus


class ChecklistItemResponse(BaseModel):
    id: int
    item: str
    order_index: int
    completed: bool
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: int
    booking_id: int
    property_id: int
    worker_id: int | None = None
    scheduled_time: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    status: TaskStatus
    priority: TaskPriority
    estimated_duration: int | None = None
    actual_duration: int | None = None
    notes: str | None = None
    worker_notes: str | None = None
    checklist: list[ChecklistItemResponse] = []

    class Config:
        from_attributes = True


class TaskDetailResponse(TaskResponse):
    """Single-task view: property access details and booking window for the worker."""
    property_name: str | None = None
    address: str | None = None
    access_instructions: str | None = None
    worker_name: str | None = None
    guest_name: str | None = None
    check_in: datetime | None = None
    check_out: datetime | None = None


class TaskHistoryResponse(BaseModel):
    id: int
    status: str
    changed_by: int | None = None
    changed_by_type: str
    notes: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AssignTaskRequest(BaseModel):
    worker_id: int


class CompleteTaskRequest(BaseModel):
    worker_notes: str | None = Field(None, max_length=5000)


class CancelTaskRequest(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class ChecklistItemUpdate(BaseModel):
    completed: bool
