"""Field workers and admin users."""
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime
from sqlalchemy.sql import func
from cleanops.database import Base
import enum


class UserType(str, enum.Enum):
    worker = "worker"
    admin = "admin"
    system = "system"


class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class Worker(Base):
    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=False)
    password_hash = Column(String(255), nullable=False)

    status = Column(String(50), nullable=False, default=UserStatus.active.value)
    rating = Column(Numeric(3, 2), nullable=False, default=0)
    language = Column(String(10), nullable=False, default="en")
    fcm_token = Column(Text, nullable=True)

    # Only the task lifecycle touches these (on completion)
    total_tasks = Column(Integer, nullable=False, default=0)
    completed_tasks = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="admin")
    status = Column(String(50), nullable=False, default=UserStatus.active.value)
    last_login = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
