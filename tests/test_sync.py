"""Multi-account sync: isolation, partial failure, sync log, idempotent reruns."""
import httpx
import pytest

from cleanops.config import AccountCredentials
from cleanops.errors import PartialFailure
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.models.sync_log import SyncLog, SYNC_FAILED, SYNC_SUCCESS
from cleanops.models.task import CleaningTask, TaskStatus
from cleanops.seed import seed_accounts
from cleanops.services.hostaway import HostawayClient
from cleanops.services.sync import SyncService, STATUS_ERROR, STATUS_SUCCESS


def _payloads(account_id, reservation_status="new"):
    listings = [
        {"id": f"{account_id}1", "name": f"Flat A ({account_id})"},
        {"id": f"{account_id}2", "name": f"Flat B ({account_id})"},
    ]
    reservations = [
        {
            "id": f"{account_id}-R1",
            "listingMapId": f"{account_id}1",
            "arrivalDate": "2030-05-01",
            "departureDate": "2030-05-04",
            "checkOutTime": 11,
            "status": reservation_status,
        },
        {
            "id": f"{account_id}-R2",
            "listingMapId": f"{account_id}2",
            "arrivalDate": "2030-05-02",
            "departureDate": "2030-05-06",
            "status": "new",
        },
        # Listing not in this account's listings
        {"id": f"{account_id}-R3", "listingMapId": "404", "arrivalDate": "2030-05-02", "departureDate": "2030-05-03"},
    ]
    return listings, reservations


def _client_factory(reservation_status="new"):
    def factory(creds: AccountCredentials):
        listings, reservations = _payloads(creds.account_id, reservation_status)

        def handler(request):
            if creds.api_key == "bad-key":
                return httpx.Response(401, json={"status": "fail", "message": "Invalid token"})
            if request.url.path.endswith("/listings"):
                return httpx.Response(200, json={"status": "success", "result": listings})
            return httpx.Response(200, json={"status": "success", "result": reservations})

        return HostawayClient(
            creds.api_key, creds.account_id, base_url="https://api.hostaway.test/v1",
            transport=httpx.MockTransport(handler),
        )
    return factory


@pytest.fixture
def service(session_factory, settings):
    return SyncService(session_factory, _client_factory(), settings)


def test_failed_account_does_not_block_others(db, service, credentials):
    seed_accounts(db, credentials)

    batch = service.sync_all(credentials)

    assert [r.status for r in batch.results] == [STATUS_SUCCESS, STATUS_ERROR, STATUS_SUCCESS]
    assert [r.account_id for r in batch.failed] == ["1002"]
    assert "401" in batch.failed[0].error
    assert batch.is_partial
    ok = batch.results[0]
    assert (ok.listings_count, ok.reservations_count, ok.reservations_skipped, ok.tasks_created) == (2, 2, 1, 2)

    assert db.query(Property).count() == 4
    assert db.query(Booking).count() == 4
    assert db.query(CleaningTask).count() == 4


def test_partial_failure_is_reported(db, service, credentials):
    seed_accounts(db, credentials)
    batch = service.sync_all(credentials)

    with pytest.raises(PartialFailure) as exc:
        batch.raise_for_failures()
    assert [r.account_id for r in exc.value.failed] == ["1002"]


def test_sync_log_per_account(db, service, credentials):
    seed_accounts(db, credentials)
    service.sync_all(credentials, trigger="manual")

    logs = {l.hostaway_account_id: l for l in db.query(SyncLog).all()}
    assert logs["1001"].status == SYNC_SUCCESS
    assert logs["1001"].tasks_created == 2
    assert logs["1001"].triggered_by == "manual"
    assert logs["1001"].completed_at is not None
    assert logs["1002"].status == SYNC_FAILED
    assert "401" in logs["1002"].error_message


def test_unregistered_account_fails_alone(db, service, credentials):
    seed_accounts(db, credentials[:1])
    batch = service.sync_all([credentials[0], credentials[2]])

    assert batch.results[0].ok
    assert not batch.results[1].ok
    assert "No active local account" in batch.results[1].error
    log = db.query(SyncLog).filter(SyncLog.hostaway_account_id == "1003").one()
    assert log.account_id is None
    assert log.status == SYNC_FAILED


def test_rerun_is_idempotent(db, service, credentials):
    seed_accounts(db, credentials)
    service.sync_all(credentials)
    again = service.sync_all(credentials)

    assert sum(r.tasks_created for r in again.results) == 0
    assert db.query(Property).count() == 4
    assert db.query(Booking).count() == 4
    assert db.query(CleaningTask).count() == 4


def test_cancelled_reservation_cancels_pending_task(db, session_factory, settings, credentials):
    seed_accounts(db, credentials[:1])
    SyncService(session_factory, _client_factory(), settings).sync_all(credentials[:1])

    result = SyncService(session_factory, _client_factory("cancelled"), settings).sync_account(credentials[0])

    assert result.tasks_cancelled == 1
    booking = db.query(Booking).filter(Booking.hostaway_booking_id == "1001-R1").one()
    db.refresh(booking)
    assert booking.booking_status == "cancelled"
    task = db.query(CleaningTask).filter(CleaningTask.booking_id == booking.id).one()
    db.refresh(task)
    assert task.status == TaskStatus.cancelled


def test_new_cancelled_reservation_gets_no_task(db, session_factory, settings, credentials):
    seed_accounts(db, credentials[:1])
    result = SyncService(session_factory, _client_factory("cancelled"), settings).sync_account(credentials[0])

    assert result.ok
    assert result.tasks_created == 1
    assert db.query(CleaningTask).count() == 1


def test_synced_properties_use_configured_cleaning_minutes(db, session_factory, settings, credentials):
    seed_accounts(db, credentials[:1])
    tuned = settings.model_copy(update={"default_cleaning_minutes": 90})

    SyncService(session_factory, _client_factory(), tuned).sync_account(credentials[0])

    assert {p.estimated_cleaning_time for p in db.query(Property).all()} == {None}
    assert {t.estimated_duration for t in db.query(CleaningTask).all()} == {90}
