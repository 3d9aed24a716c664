"""Worker schemas."""
from decimal import Decimal
from pydantic import BaseModel


class WorkerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    rating: Decimal
    total_tasks: int
    completed_tasks: int
    status: str
    language: str | None = None
    active_tasks: int = 0

    class Config:
        from_attributes = True
