"""Shared fixtures: in-memory SQLite database, settings, row factories, fake Redis."""
from datetime import datetime, timedelta, timezone

import pytest
import redis

from cleanops.config import AccountCredentials, Settings
from cleanops.database import init_db, make_engine, make_session_factory
from cleanops.models.account import Account
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.models.user import AdminUser, Worker
from cleanops.services.auth import get_password_hash
from cleanops.services.task_derivation import derive_task

UTC = timezone.utc


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        redis_url="",
        jwt_secret_key="test-secret",
        scheduler_enabled=False,
        seed_accounts_on_startup=False,
        sync_max_workers=1,
        twilio_account_sid="",
        twilio_auth_token="",
    )


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class FakeRedis:
    """Dict-backed stand-in for redis.Redis (get / setex only)."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value.encode("utf-8") if isinstance(value, str) else value
        self.ttls[key] = ttl


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def make_account(db):
    def _make(hostaway_account_id="1001", name="Main account", status="active"):
        account = Account(
            hostaway_account_id=hostaway_account_id,
            name=name,
            api_key=f"key-{hostaway_account_id}",
            api_secret="",
            status=status,
        )
        db.add(account)
        db.commit()
        return account
    return _make


@pytest.fixture
def make_property(db):
    def _make(account, listing_id="501", name="Sea View Apartment", estimated_cleaning_time=120):
        prop = Property(
            account_id=account.id,
            hostaway_listing_id=listing_id,
            name=name,
            address="1 Beach Rd",
            city="Amman",
            country="JO",
            property_type="apartment",
            bedrooms=2,
            bathrooms=1,
            estimated_cleaning_time=estimated_cleaning_time,
            access_instructions="Key box 1234",
        )
        db.add(prop)
        db.commit()
        return prop
    return _make


@pytest.fixture
def make_booking(db):
    counter = {"n": 0}

    def _make(prop, check_out=None, nights=3, status="new", hostaway_booking_id=None):
        counter["n"] += 1
        check_out = check_out or datetime(2024, 1, 10, 11, 0, tzinfo=UTC)
        booking = Booking(
            account_id=prop.account_id,
            property_id=prop.id,
            hostaway_booking_id=hostaway_booking_id or f"R{counter['n']}",
            guest_name="Jane Guest",
            check_in=check_out - timedelta(days=nights),
            check_out=check_out,
            number_of_guests=2,
            booking_status=status,
            currency="USD",
        )
        db.add(booking)
        db.commit()
        return booking
    return _make


@pytest.fixture
def make_worker(db):
    counter = {"n": 0}

    def _make(name=None, status="active", password="Worker123!"):
        counter["n"] += 1
        worker = Worker(
            name=name or f"Worker {counter['n']}",
            email=f"worker{counter['n']}@cleanops.app",
            phone=f"+96279000000{counter['n']}",
            password_hash=get_password_hash(password),
            status=status,
        )
        db.add(worker)
        db.commit()
        return worker
    return _make


@pytest.fixture
def make_admin(db):
    def _make(email="admin@cleanops.app", password="Admin123!"):
        admin = AdminUser(name="Admin User", email=email, password_hash=get_password_hash(password), role="admin")
        db.add(admin)
        db.commit()
        return admin
    return _make


@pytest.fixture
def make_task(db, make_account, make_property, make_booking):
    """Booking + derived pending task. Reuses one account/property per test."""
    state = {}

    def _make(check_out=None):
        if "prop" not in state:
            state["prop"] = make_property(make_account())
        booking = make_booking(state["prop"], check_out=check_out)
        task, _ = derive_task(db, booking)
        db.commit()
        return task
    return _make


@pytest.fixture
def credentials():
    return [
        AccountCredentials(account_id="1001", name="Account One", api_key="key-1"),
        AccountCredentials(account_id="1002", name="Account Two", api_key="bad-key"),
        AccountCredentials(account_id="1003", name="Account Three", api_key="key-3"),
    ]
