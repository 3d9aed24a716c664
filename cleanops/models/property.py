"""Rental properties mirrored from Hostaway listings."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cleanops.database import Base

DEFAULT_CLEANING_MINUTES = 120


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        UniqueConstraint("account_id", "hostaway_listing_id", name="uq_properties_account_listing"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    hostaway_listing_id = Column(String(255), nullable=False)

    # Mutable on every sync
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    # Set once on first insert; a sync never overwrites them
    property_type = Column(String(50), nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)

    # Managed locally (admins), never touched by a sync. Null = derivation uses default_cleaning_minutes
    estimated_cleaning_time = Column(Integer, nullable=True)
    special_instructions = Column(Text, nullable=True)
    access_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    account = relationship("Account", back_populates="properties")
    bookings = relationship("Booking", back_populates="property")
