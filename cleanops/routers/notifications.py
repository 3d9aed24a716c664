"""In-app notifications for the signed-in user."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cleanops.dependencies import get_current_actor, get_db
from cleanops.models.notification import Notification
from cleanops.schemas.notification import NotificationResponse
from cleanops.services.auth import Actor

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    q = db.query(Notification).filter(
        Notification.user_id == actor.user_id,
        Notification.user_type == actor.user_type.value,
    )
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    return q.order_by(Notification.id.desc()).limit(50).all()


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    n = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.user_id == actor.user_id,
            Notification.user_type == actor.user_type.value,
        )
        .first()
    )
    if not n:
        raise HTTPException(status_code=404, detail="Notification not found")
    n.read = True
    db.commit()
    db.refresh(n)
    return n
