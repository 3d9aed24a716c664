"""Cleaning tasks, their checklists, status history and sent reminders."""
import enum

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, ForeignKey, DateTime, UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cleanops.database import Base


class TaskStatus(str, enum.Enum):
    pending = "pending"
    assigned = "assigned"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class TaskPriority(str, enum.Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class CleaningTask(Base):
    __tablename__ = "cleaning_tasks"

    id = Column(Integer, primary_key=True, index=True)
    # One task per booking, enforced by the database
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="SET NULL"), nullable=True, index=True)

    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    status = Column(SQLEnum(TaskStatus), nullable=False, default=TaskStatus.pending, index=True)
    priority = Column(SQLEnum(TaskPriority), nullable=False, default=TaskPriority.normal)

    estimated_duration = Column(Integer, nullable=True)  # minutes
    actual_duration = Column(Integer, nullable=True)  # minutes, set on completion
    notes = Column(Text, nullable=True)
    worker_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    booking = relationship("Booking", back_populates="cleaning_task")
    property = relationship("Property")
    worker = relationship("Worker")
    checklist = relationship(
        "ChecklistItem",
        back_populates="task",
        order_by="ChecklistItem.order_index",
        cascade="all, delete-orphan",
    )


class ChecklistItem(Base):
    __tablename__ = "task_checklist_items"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("cleaning_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    item = Column(String(255), nullable=False)
    order_index = Column(Integer, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("CleaningTask", back_populates="checklist")


class TaskHistory(Base):
    """Append-only status history. No updates or deletes."""
    __tablename__ = "task_history"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("cleaning_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(50), nullable=False)
    changed_by = Column(Integer, nullable=True)
    changed_by_type = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TaskReminder(Base):
    """Marks a reminder as sent so each (task, hour mark) fires at most once."""
    __tablename__ = "task_reminders"
    __table_args__ = (UniqueConstraint("task_id", "hours_before", name="uq_task_reminders_task_mark"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("cleaning_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    hours_before = Column(Integer, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False)
