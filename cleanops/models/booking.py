"""Guest bookings mirrored from Hostaway reservations."""
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Numeric, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cleanops.database import Base

# Hostaway reservation statuses that never need a turnover cleaning
INACTIVE_BOOKING_STATUSES = frozenset({"cancelled", "declined", "expired", "inquiry", "inquiryDenied"})


def is_actionable_status(booking_status: str | None) -> bool:
    return (booking_status or "") not in INACTIVE_BOOKING_STATUSES


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint("account_id", "hostaway_booking_id", name="uq_bookings_account_booking"),
        CheckConstraint("check_out > check_in", name="ck_bookings_checkout_after_checkin"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    hostaway_booking_id = Column(String(255), nullable=False)

    # Immutable after first insert
    guest_name = Column(String(255), nullable=True)
    guest_email = Column(String(255), nullable=True)
    guest_phone = Column(String(50), nullable=True)
    check_in = Column(DateTime(timezone=True), nullable=False, index=True)
    check_out = Column(DateTime(timezone=True), nullable=False)
    number_of_guests = Column(Integer, nullable=True)
    total_price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(10), nullable=True)

    # The only field a sync updates on an existing booking
    booking_status = Column(String(50), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    property = relationship("Property", back_populates="bookings")
    cleaning_task = relationship("CleaningTask", back_populates="booking", uselist=False)
