"""
Hostaway sync: for each configured account, fetch listings and reservations, reconcile them
into local rows and derive cleaning tasks.

Accounts are isolated from each other: any failure is caught, logged and recorded for that
account only (SyncLog row + failed result), and the batch continues. Within one account the
steps are sequential (listings before reservations, since reservations resolve properties).
Each account runs in its own session, so accounts can be synced in parallel.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from cleanops.config import AccountCredentials, Settings
from cleanops.errors import CleanOpsError, PartialFailure
from cleanops.models.sync_log import SyncLog, SYNC_FAILED, SYNC_RUNNING, SYNC_SUCCESS
from cleanops.services import reconciliation, task_derivation
from cleanops.services.hostaway import HostawayClient
from cleanops.services.timeutil import utcnow

logger = logging.getLogger("uvicorn.error")

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass
class AccountSyncResult:
    account_id: str
    name: str
    status: str
    listings_count: int = 0
    reservations_count: int = 0
    reservations_skipped: int = 0
    tasks_created: int = 0
    tasks_cancelled: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS


@dataclass
class SyncBatchResult:
    results: list[AccountSyncResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[AccountSyncResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[AccountSyncResult]:
        return [r for r in self.results if not r.ok]

    @property
    def is_partial(self) -> bool:
        return bool(self.failed) and bool(self.succeeded)

    def raise_for_failures(self) -> None:
        if self.failed:
            ids = ", ".join(r.account_id for r in self.failed)
            raise PartialFailure(f"Sync failed for account(s): {ids}", failed=self.failed)


class SyncService:
    def __init__(
        self,
        session_factory,
        client_factory: Callable[[AccountCredentials], HostawayClient],
        settings: Settings,
    ):
        self.session_factory = session_factory
        self.client_factory = client_factory
        self.settings = settings

    def sync_all(self, accounts: list[AccountCredentials], trigger: str = "scheduler") -> SyncBatchResult:
        workers = max(1, min(self.settings.sync_max_workers, len(accounts) or 1))
        if workers == 1:
            results = [self.sync_account(a, trigger) for a in accounts]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hostaway-sync") as pool:
                results = list(pool.map(lambda a: self.sync_account(a, trigger), accounts))
        batch = SyncBatchResult(results=results)
        logger.info(
            "Hostaway sync finished: %d account(s), %d ok, %d failed",
            len(results), len(batch.succeeded), len(batch.failed),
        )
        return batch

    def sync_account(self, credentials: AccountCredentials, trigger: str = "scheduler") -> AccountSyncResult:
        """Sync one account. Never raises; failures come back as an error result."""
        result = AccountSyncResult(account_id=credentials.account_id, name=credentials.name, status=STATUS_SUCCESS)
        db = self.session_factory()
        started = utcnow()
        log = None
        try:
            log = SyncLog(
                hostaway_account_id=credentials.account_id,
                status=SYNC_RUNNING,
                triggered_by=trigger,
                started_at=started,
            )
            db.add(log)
            db.commit()

            self._run(db, credentials, result, log)
        except (CleanOpsError, SQLAlchemyError) as e:
            db.rollback()
            result.status = STATUS_ERROR
            result.error = getattr(e, "message", None) or str(e)
            logger.warning("Error syncing account %s: %s", credentials.account_id, result.error)
        except Exception as e:
            # Anything unexpected stays isolated to this account as well
            db.rollback()
            result.status = STATUS_ERROR
            result.error = f"{type(e).__name__}: {e}"
            logger.exception("Unexpected error syncing account %s", credentials.account_id)
        finally:
            try:
                self._finish_log(db, log, result, started)
            finally:
                db.close()
        return result

    def _run(self, db, credentials: AccountCredentials, result: AccountSyncResult, log: SyncLog) -> None:
        account = reconciliation.resolve_account(db, credentials.account_id)
        log.account_id = account.id
        db.commit()
        client = self.client_factory(credentials)

        listings = client.list_listings()
        listing_stats = reconciliation.reconcile_listings(db, account, listings)
        db.commit()
        result.listings_count = listing_stats.total

        today = utcnow().date()
        end = today + timedelta(days=self.settings.reservation_window_days)
        reservations = client.list_reservations(today, end)
        bookings, res_stats = reconciliation.reconcile_reservations(db, account, reservations)
        result.reservations_count = res_stats.total
        result.reservations_skipped = res_stats.skipped

        result.tasks_created = task_derivation.derive_tasks_for_bookings(
            db,
            bookings,
            offset=timedelta(hours=self.settings.cleaning_offset_hours),
            default_minutes=self.settings.default_cleaning_minutes,
        )
        db.commit()
        result.tasks_cancelled = task_derivation.cancel_tasks_for_inactive_bookings(db, bookings)

        logger.info(
            "Synced account %s: %d listings, %d reservations (%d skipped), %d new task(s)",
            credentials.account_id, result.listings_count, result.reservations_count,
            result.reservations_skipped, result.tasks_created,
        )

    def _finish_log(self, db, log: SyncLog | None, result: AccountSyncResult, started) -> None:
        if log is None or log.id is None:
            return
        try:
            completed = utcnow()
            log = db.merge(log)
            log.status = SYNC_SUCCESS if result.ok else SYNC_FAILED
            log.listings_count = result.listings_count
            log.reservations_count = result.reservations_count
            log.reservations_skipped = result.reservations_skipped
            log.tasks_created = result.tasks_created
            log.error_message = result.error
            log.completed_at = completed
            log.duration_seconds = (completed - started).total_seconds()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Could not record sync log for account %s", result.account_id)
