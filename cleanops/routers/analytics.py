"""Admin dashboard counters."""
from datetime import datetime, time, timedelta, timezone
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from cleanops.dependencies import get_db, require_admin
from cleanops.models.account import Account, ACCOUNT_ACTIVE
from cleanops.models.task import CleaningTask, TaskStatus
from cleanops.models.user import UserStatus, Worker
from cleanops.schemas.analytics import OverviewResponse
from cleanops.services.auth import Actor
from cleanops.services.task_lifecycle import ACTIVE_STATUSES
from cleanops.services.timeutil import utcnow

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _count_tasks(db: Session, *criteria) -> int:
    return db.query(func.count(CleaningTask.id)).filter(*criteria).scalar() or 0


@router.get("/overview", response_model=OverviewResponse)
def overview(db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    day_start = datetime.combine(utcnow().date(), time.min, tzinfo=timezone.utc)
    day_end = day_start + timedelta(days=1)
    busy = db.query(CleaningTask.worker_id).filter(
        CleaningTask.worker_id.isnot(None), CleaningTask.status.in_(ACTIVE_STATUSES),
    )
    available = (
        db.query(func.count(Worker.id))
        .filter(Worker.status == UserStatus.active.value, Worker.id.notin_(busy))
        .scalar()
    )
    return OverviewResponse(
        total_accounts=db.query(func.count(Account.id)).filter(Account.status == ACCOUNT_ACTIVE).scalar() or 0,
        today_tasks=_count_tasks(
            db, CleaningTask.scheduled_time >= day_start, CleaningTask.scheduled_time < day_end,
        ),
        available_workers=available or 0,
        in_progress=_count_tasks(db, CleaningTask.status == TaskStatus.in_progress),
        pending_tasks=_count_tasks(db, CleaningTask.status == TaskStatus.pending),
    )
