"""Admin and worker login, worker self-registration."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleanops.config import Settings
from cleanops.dependencies import get_app_settings, get_db
from cleanops.models.user import AdminUser, UserStatus, UserType, Worker
from cleanops.schemas.auth import LoginRequest, Token, WorkerRegister
from cleanops.services.auth import create_access_token, get_password_hash, verify_password
from cleanops.services.timeutil import utcnow

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/admin/login", response_model=Token)
def admin_login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    admin = db.query(AdminUser).filter(AdminUser.email == data.email).first()
    if not admin or not verify_password(data.password, admin.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if admin.status != UserStatus.active.value:
        raise HTTPException(status_code=403, detail="Account is disabled")
    admin.last_login = utcnow()
    db.commit()
    token = create_access_token(settings, admin.id, UserType.admin, admin.role)
    return Token(access_token=token, user_id=admin.id, user_type=UserType.admin, name=admin.name, role=admin.role)


@router.post("/worker/login", response_model=Token)
def worker_login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    worker = db.query(Worker).filter(Worker.email == data.email).first()
    if not worker or not verify_password(data.password, worker.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if worker.status != UserStatus.active.value:
        raise HTTPException(status_code=403, detail="Account is disabled")
    token = create_access_token(settings, worker.id, UserType.worker, "worker")
    return Token(access_token=token, user_id=worker.id, user_type=UserType.worker, name=worker.name, role="worker")


@router.post("/register/worker", response_model=Token, status_code=201)
def register_worker(
    data: WorkerRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if db.query(Worker).filter(Worker.email == data.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    worker = Worker(
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=get_password_hash(data.password),
        language=data.language,
    )
    db.add(worker)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    db.refresh(worker)
    logger.info("Worker registered: %s", worker.email)
    token = create_access_token(settings, worker.id, UserType.worker, "worker")
    return Token(access_token=token, user_id=worker.id, user_type=UserType.worker, name=worker.name, role="worker")
