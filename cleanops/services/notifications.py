"""Notification dispatch: persist in-app notifications, hand off to push/SMS transports.

enqueue() is fire-and-forget for the caller: the row is written in the caller's transaction
and delivery problems are logged, never raised. Push is not wired yet (logged only); urgent
notifications go out by SMS through Twilio when it is configured.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from cleanops.config import Settings
from cleanops.models.notification import Notification
from cleanops.models.user import UserType, Worker
from cleanops.services.timeutil import utcnow

logger = logging.getLogger("uvicorn.error")

TYPE_TASK_REMINDER = "task_reminder"
TYPE_TASK_ASSIGNED = "task_assigned"


class NotificationDispatcher:
    def __init__(self, settings: Settings):
        self.settings = settings

    def enqueue(
        self,
        db: Session,
        type: str,
        recipient_id: int,
        recipient_type: str,
        payload: dict[str, Any],
    ) -> Notification:
        """Record the notification and attempt delivery. Commit remains with caller."""
        recipient_type = getattr(recipient_type, "value", recipient_type)
        notification = Notification(
            user_id=recipient_id,
            user_type=recipient_type,
            type=type,
            title=(payload.get("title") or "")[:255] or None,
            body=payload.get("body"),
            data=payload,
            sent_at=utcnow(),
        )
        db.add(notification)
        db.flush()
        logger.info("Notification %s queued: %s for %s %s", notification.id, type, recipient_type, recipient_id)

        self.send_push(db, recipient_id, recipient_type, payload)
        if payload.get("urgent"):
            self._send_urgent_sms(db, recipient_id, recipient_type, payload)
        return notification

    def send_push(self, db: Session, recipient_id: int, recipient_type: str, payload: dict[str, Any]) -> bool:
        # TODO: deliver through FCM once workers register device tokens from the mobile app
        logger.debug("Push delivery not configured; %s %s: %s", recipient_type, recipient_id, payload.get("title"))
        return False

    def _send_urgent_sms(self, db: Session, recipient_id: int, recipient_type: str, payload: dict[str, Any]) -> bool:
        if recipient_type != UserType.worker.value:
            return False
        worker = db.get(Worker, recipient_id)
        if not worker or not worker.phone:
            return False
        body = payload.get("body") or payload.get("title") or ""
        return self.send_sms(worker.phone, body)

    def send_sms(self, to_phone: str, body: str) -> bool:
        """Optional SMS via Twilio."""
        s = self.settings
        if not s.twilio_account_sid or not s.twilio_auth_token:
            logger.info("[SMS] NOT SENT to %s: Twilio is not configured", to_phone)
            return False
        try:
            from twilio.rest import Client

            client = Client(s.twilio_account_sid, s.twilio_auth_token)
            client.messages.create(body=body, from_=s.twilio_from_phone_number, to=to_phone)
            return True
        except Exception as e:
            # Twilio or transport error; logged, never raised to the caller
            logger.warning("[SMS] Twilio send failed to %s: %s", to_phone, e)
            return False
