"""One row per account sync attempt."""
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from cleanops.database import Base

SYNC_RUNNING = "running"
SYNC_SUCCESS = "success"
SYNC_FAILED = "failed"


class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, index=True)
    # Null when the account could not be resolved locally
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)
    hostaway_account_id = Column(String(255), nullable=False)

    status = Column(String(20), nullable=False, default=SYNC_RUNNING)  # running, success, failed
    triggered_by = Column(String(50), nullable=False, default="scheduler")  # scheduler, manual, cli

    listings_count = Column(Integer, nullable=False, default=0)
    reservations_count = Column(Integer, nullable=False, default=0)
    reservations_skipped = Column(Integer, nullable=False, default=0)
    tasks_created = Column(Integer, nullable=False, default=0)

    error_message = Column(Text, nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Float, nullable=True)
