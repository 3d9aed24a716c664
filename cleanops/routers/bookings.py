"""Bookings view for the admin dashboard."""
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cleanops.dependencies import get_db, require_admin
from cleanops.models.account import Account
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.models.task import CleaningTask
from cleanops.schemas.booking import BookingResponse
from cleanops.services.auth import Actor

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=list[BookingResponse])
def list_bookings(
    status: str | None = None,
    property_id: int | None = None,
    account_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    q = (
        db.query(Booking, Property, Account, CleaningTask)
        .join(Property, Booking.property_id == Property.id)
        .join(Account, Booking.account_id == Account.id)
        .outerjoin(CleaningTask, CleaningTask.booking_id == Booking.id)
    )
    if status:
        q = q.filter(Booking.booking_status == status)
    if property_id is not None:
        q = q.filter(Booking.property_id == property_id)
    if account_id is not None:
        q = q.filter(Booking.account_id == account_id)
    if start_date is not None:
        q = q.filter(Booking.check_in >= start_date)
    if end_date is not None:
        q = q.filter(Booking.check_in <= end_date)
    rows = q.order_by(Booking.check_in.asc()).limit(limit).all()
    return [
        BookingResponse(
            id=b.id,
            account_id=b.account_id,
            property_id=b.property_id,
            hostaway_booking_id=b.hostaway_booking_id,
            guest_name=b.guest_name,
            guest_email=b.guest_email,
            guest_phone=b.guest_phone,
            check_in=b.check_in,
            check_out=b.check_out,
            number_of_guests=b.number_of_guests,
            booking_status=b.booking_status,
            total_price=b.total_price,
            currency=b.currency,
            property_name=p.name,
            account_name=a.name,
            task_id=t.id if t else None,
            task_status=t.status if t else None,
        )
        for b, p, a, t in rows
    ]
