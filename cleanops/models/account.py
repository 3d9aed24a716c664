"""Hostaway accounts: external credentials + identity; each owns its properties."""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cleanops.database import Base

ACCOUNT_ACTIVE = "active"
ACCOUNT_DISABLED = "disabled"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    hostaway_account_id = Column(String(255), unique=True, nullable=False, index=True)
    api_key = Column(Text, nullable=False)
    api_secret = Column(Text, nullable=False, default="")
    status = Column(String(50), nullable=False, default=ACCOUNT_ACTIVE)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    properties = relationship("Property", back_populates="account")
