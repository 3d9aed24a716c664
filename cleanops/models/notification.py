"""In-app notifications (one row per enqueued notification)."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from cleanops.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    # Polymorphic recipient: (user_id, user_type) points at workers or admin_users
    user_id = Column(Integer, nullable=False, index=True)
    user_type = Column(String(50), nullable=False)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=True)
    body = Column(Text, nullable=True)
    data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    read = Column(Boolean, nullable=False, default=False, index=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
