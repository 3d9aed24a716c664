"""
Create the tables, register configured Hostaway accounts and add demo users
(one admin and four field workers) so you can log in and test the app.

Run from project root:
  python scripts/seed_demo.py [--admin-password ...] [--worker-password ...]

Credentials are printed at the end. Use /auth/admin/login for the admin, /auth/worker/login for workers.
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cleanops.config import get_settings, load_configured_accounts
from cleanops.database import init_db, make_engine, make_session_factory
from cleanops.seed import DEMO_WORKERS, seed_accounts, seed_demo_users


def main():
    parser = argparse.ArgumentParser(description="Seed CleanOps demo data")
    parser.add_argument("--admin-password", default="Admin123!")
    parser.add_argument("--worker-password", default="Worker123!")
    args = parser.parse_args()

    settings = get_settings()
    engine = make_engine(settings.database_url)
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        count = seed_accounts(db, load_configured_accounts())
        seed_demo_users(db, args.admin_password, args.worker_password)
    finally:
        db.close()

    print(f"Registered {count} Hostaway account(s)")
    print(f"Admin:   admin@cleanops.app / {args.admin_password}")
    for w in DEMO_WORKERS:
        print(f"Worker:  {w['email']} / {args.worker_password}")


if __name__ == "__main__":
    main()
