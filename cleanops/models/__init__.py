"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table.
"""
from cleanops.models.account import Account
from cleanops.models.property import Property
from cleanops.models.booking import Booking
from cleanops.models.user import Worker, AdminUser, UserType, UserStatus
from cleanops.models.task import (
    CleaningTask,
    ChecklistItem,
    TaskHistory,
    TaskReminder,
    TaskStatus,
    TaskPriority,
)
from cleanops.models.notification import Notification
from cleanops.models.sync_log import SyncLog

__all__ = [
    "Account",
    "Property",
    "Booking",
    "Worker",
    "AdminUser",
    "UserType",
    "UserStatus",
    "CleaningTask",
    "ChecklistItem",
    "TaskHistory",
    "TaskReminder",
    "TaskStatus",
    "TaskPriority",
    "Notification",
    "SyncLog",
]
