"""Background jobs: Hostaway sync every 30 minutes, task reminders every hour."""
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from cleanops.config import Settings, load_configured_accounts
from cleanops.services.notifications import NotificationDispatcher
from cleanops.services.reminders import send_task_reminders
from cleanops.services.sync import SyncService

logger = logging.getLogger("uvicorn.error")


def run_sync_job(sync_service: SyncService) -> None:
    accounts = load_configured_accounts()
    if not accounts:
        logger.info("Hostaway sync skipped: no HOSTAWAY_ACCOUNT_n_* accounts configured")
        return
    logger.info("Starting scheduled Hostaway sync for %d account(s)", len(accounts))
    batch = sync_service.sync_all(accounts, trigger="scheduler")
    for failed in batch.failed:
        logger.warning("Scheduled sync failed for account %s: %s", failed.account_id, failed.error)


def run_reminder_job(session_factory, dispatcher: NotificationDispatcher, settings: Settings) -> None:
    db = session_factory()
    try:
        send_task_reminders(db, dispatcher, marks=tuple(settings.reminder_marks_hours))
    finally:
        db.close()


def build_scheduler(
    settings: Settings,
    session_factory,
    sync_service: SyncService,
    dispatcher: NotificationDispatcher,
) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_sync_job,
        "interval",
        minutes=settings.sync_interval_minutes,
        args=[sync_service],
        id="hostaway_sync",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        run_reminder_job,
        "cron",
        minute=0,
        args=[session_factory, dispatcher, settings],
        id="task_reminders",
        max_instances=1,
        coalesce=True,
    )
    return scheduler
