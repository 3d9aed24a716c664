"""Listing/reservation reconciliation into Property and Booking rows."""
from datetime import datetime, timezone

import pytest

from cleanops.config import AccountCredentials
from cleanops.errors import AccountUnresolved
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.schemas.hostaway import ListingDTO, ReservationDTO
from cleanops.services import reconciliation
from cleanops.services.timeutil import as_utc

UTC = timezone.utc


def _listing(id, **kw):
    return ListingDTO.model_validate({"id": id, "name": kw.pop("name", f"Listing {id}"), **kw})


def _reservation(id, listing_id="501", arrival="2024-01-07", departure="2024-01-10", **kw):
    return ReservationDTO.model_validate(
        {"id": id, "listingMapId": listing_id, "arrivalDate": arrival, "departureDate": departure, **kw}
    )


def test_register_account_is_idempotent(db):
    creds = AccountCredentials(account_id="1001", name="Main", api_key="k1")
    first = reconciliation.register_account(db, creds)
    second = reconciliation.register_account(db, AccountCredentials(account_id="1001", name="Renamed", api_key="k2"))
    db.commit()

    assert first.id == second.id
    assert second.name == "Renamed"
    assert second.api_key == "k2"


def test_resolve_account_requires_active_account(db, make_account):
    make_account("1001")
    make_account("1002", status="disabled")

    assert reconciliation.resolve_account(db, "1001").hostaway_account_id == "1001"
    with pytest.raises(AccountUnresolved):
        reconciliation.resolve_account(db, "1002")
    with pytest.raises(AccountUnresolved):
        reconciliation.resolve_account(db, "9999")


def test_reconcile_listings_inserts_with_defaults(db, make_account):
    account = make_account()
    stats = reconciliation.reconcile_listings(db, account, [_listing(501), _listing(502, bedrooms=3, bathrooms=2)])
    db.commit()

    assert (stats.created, stats.updated, stats.total) == (2, 0, 2)
    p501 = db.query(Property).filter(Property.hostaway_listing_id == "501").one()
    assert p501.bedrooms == 0
    assert p501.bathrooms == 0
    assert p501.property_type == "apartment"
    assert p501.estimated_cleaning_time is None


def test_reconcile_listings_rerun_is_noop(db, make_account):
    account = make_account()
    listings = [_listing(501, city="Amman"), _listing(502)]
    reconciliation.reconcile_listings(db, account, listings)
    db.commit()

    stats = reconciliation.reconcile_listings(db, account, listings)
    assert (stats.created, stats.updated, stats.unchanged) == (0, 0, 2)
    assert db.query(Property).count() == 2


def test_reconcile_listings_updates_descriptive_fields_only(db, make_account):
    account = make_account()
    reconciliation.reconcile_listings(db, account, [_listing(501, bedrooms=2)])
    db.commit()

    stats = reconciliation.reconcile_listings(
        db, account, [_listing(501, name="Renamed", bedrooms=5, propertyTypeName="villa")],
    )
    db.commit()

    prop = db.query(Property).one()
    assert stats.updated == 1
    assert prop.name == "Renamed"
    assert prop.bedrooms == 2
    assert prop.property_type == "apartment"


def test_same_listing_id_in_two_accounts_is_two_properties(db, make_account):
    a1 = make_account("1001")
    a2 = make_account("1002")
    reconciliation.reconcile_listings(db, a1, [_listing(501)])
    reconciliation.reconcile_listings(db, a2, [_listing(501)])
    db.commit()
    assert db.query(Property).count() == 2


def test_reservation_for_unknown_listing_is_skipped(db, make_account, make_property):
    account = make_account()
    make_property(account, listing_id="501")

    bookings, stats = reconciliation.reconcile_reservations(
        db, account, [_reservation("R1"), _reservation("R2", listing_id="999")],
    )
    db.commit()

    assert [b.hostaway_booking_id for b in bookings] == ["R1"]
    assert stats.skipped == 1
    assert db.query(Booking).count() == 1


def test_reservation_with_departure_not_after_arrival_is_skipped(db, make_account, make_property):
    account = make_account()
    make_property(account)

    bookings, stats = reconciliation.reconcile_reservations(
        db, account, [_reservation("R1", arrival="2024-01-10", departure="2024-01-10")],
    )
    assert bookings == []
    assert stats.skipped == 1


def test_reservation_insert_defaults(db, make_account, make_property):
    account = make_account()
    make_property(account)

    bookings, _ = reconciliation.reconcile_reservations(db, account, [_reservation("R1")])
    db.commit()

    booking = bookings[0]
    assert booking.guest_name == "Guest"
    assert booking.number_of_guests == 1
    assert booking.currency == "USD"
    assert as_utc(booking.check_out) == datetime(2024, 1, 10, tzinfo=UTC)


def test_existing_reservation_only_status_changes(db, make_account, make_property):
    account = make_account()
    make_property(account)
    reconciliation.reconcile_reservations(db, account, [_reservation("R1", guestName="Jane", status="new")])
    db.commit()

    bookings, stats = reconciliation.reconcile_reservations(
        db,
        account,
        [_reservation("R1", departure="2024-01-12", guestName="Someone Else", status="modified")],
    )
    db.commit()

    booking = db.query(Booking).one()
    assert stats.updated == 1
    assert booking.booking_status == "modified"
    assert booking.guest_name == "Jane"
    assert as_utc(booking.check_out) == datetime(2024, 1, 10, tzinfo=UTC)


def test_reservation_rerun_is_noop(db, make_account, make_property):
    account = make_account()
    make_property(account)
    batch = [_reservation("R1", status="new"), _reservation("R2", status="new")]
    reconciliation.reconcile_reservations(db, account, batch)
    db.commit()

    bookings, stats = reconciliation.reconcile_reservations(db, account, batch)
    assert len(bookings) == 2
    assert (stats.created, stats.updated, stats.unchanged) == (0, 0, 2)
    assert db.query(Booking).count() == 2
