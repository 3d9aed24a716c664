"""
Run one Hostaway sync outside the scheduler (all configured accounts, or one).

Run from project root:
  python scripts/run_sync.py              # every HOSTAWAY_ACCOUNT_n_* account
  python scripts/run_sync.py --account 12345
  python scripts/run_sync.py --reminders  # also send due task reminders

Exits 1 if any account failed.
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cleanops.config import get_settings, load_configured_accounts
from cleanops.database import init_db, make_engine, make_session_factory
from cleanops.seed import seed_accounts
from cleanops.services.cache import ListingsCache
from cleanops.services.hostaway import HostawayClient
from cleanops.services.notifications import NotificationDispatcher
from cleanops.services.scheduler import run_reminder_job
from cleanops.services.sync import SyncService


def main():
    parser = argparse.ArgumentParser(description="Sync Hostaway listings and reservations")
    parser.add_argument("--account", help="Only sync this Hostaway account id")
    parser.add_argument("--reminders", action="store_true", help="Send due task reminders after syncing")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    settings = get_settings()
    accounts = load_configured_accounts()
    if args.account:
        accounts = [a for a in accounts if a.account_id == args.account]
    if not accounts:
        print("No matching Hostaway accounts configured (HOSTAWAY_ACCOUNT_n_ID)")
        sys.exit(1)

    engine = make_engine(settings.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)
    db = session_factory()
    try:
        seed_accounts(db, accounts)
    finally:
        db.close()

    cache = ListingsCache.from_url(settings.redis_url, settings.listings_cache_ttl_seconds)
    service = SyncService(
        session_factory,
        lambda creds: HostawayClient.for_account(creds, settings, cache),
        settings,
    )
    batch = service.sync_all(accounts, trigger="cli")
    for r in batch.results:
        line = (
            f"{r.account_id} ({r.name}): {r.status} listings={r.listings_count} "
            f"reservations={r.reservations_count} skipped={r.reservations_skipped} "
            f"tasks_created={r.tasks_created} tasks_cancelled={r.tasks_cancelled}"
        )
        print(line + (f" error={r.error}" if r.error else ""))

    if args.reminders:
        run_reminder_job(session_factory, NotificationDispatcher(settings), settings)

    sys.exit(1 if batch.failed else 0)


if __name__ == "__main__":
    main()
