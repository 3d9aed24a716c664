"""Account and sync schemas."""
from datetime import datetime
from pydantic import BaseModel


class AccountResponse(BaseModel):
    id: int
    name: str
    hostaway_account_id: str
    status: str
    created_at: datetime | None = None
    properties_count: int = 0
    upcoming_bookings: int = 0


class AccountSyncResultResponse(BaseModel):
    account_id: str
    name: str
    status: str  # success, error
    listings_count: int = 0
    reservations_count: int = 0
    reservations_skipped: int = 0
    tasks_created: int = 0
    tasks_cancelled: int = 0
    error: str | None = None

    class Config:
        from_attributes = True


class SyncBatchResponse(BaseModel):
    message: str
    status: str  # success, partial, failed
    results: list[AccountSyncResultResponse]
