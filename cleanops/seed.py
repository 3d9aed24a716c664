"""Seed data: configured Hostaway accounts (startup) and demo users (scripts/seed_demo.py)."""
import logging

from sqlalchemy.orm import Session

from cleanops.config import AccountCredentials
from cleanops.models.user import AdminUser, Worker
from cleanops.services.auth import get_password_hash
from cleanops.services.reconciliation import register_account

logger = logging.getLogger("uvicorn.error")

DEMO_WORKERS = [
    {"name": "Ahmad Mohammad", "email": "ahmad@cleanops.app", "phone": "+962791234567"},
    {"name": "Sara Ahmad", "email": "sara@cleanops.app", "phone": "+962781234567"},
    {"name": "Mahmoud Khaled", "email": "mahmoud@cleanops.app", "phone": "+962771234567"},
    {"name": "Fatima Ali", "email": "fatima@cleanops.app", "phone": "+962791234568"},
]


def seed_accounts(db: Session, accounts: list[AccountCredentials]) -> int:
    """Register every configured account as a local Account row (idempotent)."""
    for creds in accounts:
        register_account(db, creds)
    db.commit()
    if accounts:
        logger.info("Registered %d Hostaway account(s)", len(accounts))
    return len(accounts)


def seed_demo_users(db: Session, admin_password: str, worker_password: str) -> None:
    if not db.query(AdminUser).filter(AdminUser.email == "admin@cleanops.app").first():
        db.add(
            AdminUser(
                name="Admin User",
                email="admin@cleanops.app",
                password_hash=get_password_hash(admin_password),
                role="admin",
            )
        )
    worker_hash = get_password_hash(worker_password)
    for w in DEMO_WORKERS:
        if db.query(Worker).filter(Worker.email == w["email"]).first():
            continue
        db.add(Worker(password_hash=worker_hash, **w))
    db.commit()
