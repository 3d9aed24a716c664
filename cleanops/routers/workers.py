"""Worker roster and the worker's own profile."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from cleanops.dependencies import get_db, require_admin, require_worker
from cleanops.models.task import CleaningTask
from cleanops.models.user import Worker
from cleanops.schemas.worker import WorkerResponse
from cleanops.services.auth import Actor
from cleanops.services.task_lifecycle import ACTIVE_STATUSES

router = APIRouter(prefix="/workers", tags=["workers"])


def _active_tasks(db: Session, worker_id: int) -> int:
    return (
        db.query(func.count(CleaningTask.id))
        .filter(CleaningTask.worker_id == worker_id, CleaningTask.status.in_(ACTIVE_STATUSES))
        .scalar()
        or 0
    )


def _to_response(db: Session, worker: Worker) -> WorkerResponse:
    out = WorkerResponse.model_validate(worker)
    out.active_tasks = _active_tasks(db, worker.id)
    return out


@router.get("", response_model=list[WorkerResponse])
def list_workers(
    status: str | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin),
):
    q = db.query(Worker)
    if status:
        q = q.filter(Worker.status == status)
    return [_to_response(db, w) for w in q.order_by(Worker.name).all()]


@router.get("/me", response_model=WorkerResponse)
def get_me(db: Session = Depends(get_db), actor: Actor = Depends(require_worker)):
    worker = db.get(Worker, actor.user_id)
    if not worker:
        raise HTTPException(status_code=404, detail="Worker not found")
    return _to_response(db, worker)
