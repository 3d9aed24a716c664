"""Admin dashboard overview."""
from pydantic import BaseModel


class OverviewResponse(BaseModel):
    total_accounts: int
    today_tasks: int
    available_workers: int
    in_progress: int
    pending_tasks: int
