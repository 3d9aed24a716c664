"""Booking schemas."""
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel

from cleanops.models.task import TaskStatus


class BookingResponse(BaseModel):
    id: int
    account_id: int
    property_id: int
    hostaway_booking_id: str
    guest_name: str | None = None
    guest_email: str | None = None
    guest_phone: str | None = None
    check_in: datetime
    check_out: datetime
    number_of_guests: int | None = None
    booking_status: str | None = None
    total_price: Decimal | None = None
    currency: str | None = None
    property_name: str | None = None
    account_name: str | None = None
    task_id: int | None = None
    task_status: TaskStatus | None = None
