"""
Reconcile Hostaway listings/reservations into local Property and Booking rows.

Upserts are keyed by natural key: (account_id, hostaway_listing_id) for properties and
(account_id, hostaway_booking_id) for bookings. A row is only written when a value actually
changes, so re-running a sync with identical external data is a no-op.
Functions flush but never commit; the transaction belongs to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from cleanops.config import AccountCredentials
from cleanops.errors import AccountUnresolved
from cleanops.models.account import Account, ACCOUNT_ACTIVE
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.schemas.hostaway import ListingDTO, ReservationDTO
from cleanops.services.timeutil import as_utc

logger = logging.getLogger("uvicorn.error")

DEFAULT_PROPERTY_TYPE = "apartment"
DEFAULT_GUEST_NAME = "Guest"
DEFAULT_CURRENCY = "USD"


@dataclass
class ReconcileStats:
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        """Rows reconciled (created, updated or already up to date)."""
        return self.created + self.updated + self.unchanged


def _apply_changes(obj, fields: dict) -> bool:
    changed = False
    for name, value in fields.items():
        if getattr(obj, name) != value:
            setattr(obj, name, value)
            changed = True
    return changed


def register_account(db: Session, credentials: AccountCredentials) -> Account:
    """Create or refresh the local Account for a configured Hostaway account."""
    account = (
        db.query(Account)
        .filter(Account.hostaway_account_id == credentials.account_id)
        .first()
    )
    fields = {
        "name": credentials.name,
        "api_key": credentials.api_key,
        "api_secret": credentials.api_secret,
    }
    if account is None:
        account = Account(hostaway_account_id=credentials.account_id, status=ACCOUNT_ACTIVE, **fields)
        db.add(account)
    else:
        _apply_changes(account, fields)
    db.flush()
    return account


def resolve_account(db: Session, hostaway_account_id: str) -> Account:
    account = (
        db.query(Account)
        .filter(
            Account.hostaway_account_id == hostaway_account_id,
            Account.status == ACCOUNT_ACTIVE,
        )
        .first()
    )
    if account is None:
        raise AccountUnresolved(f"No active local account for Hostaway account {hostaway_account_id}")
    return account


def _whole(value: float | int | None) -> int:
    # Absent counts become 0 on insert (known to hide real data, see DESIGN.md)
    if value is None:
        return 0
    return int(round(value))


def reconcile_listings(db: Session, account: Account, listings: list[ListingDTO]) -> ReconcileStats:
    stats = ReconcileStats()
    existing = {
        p.hostaway_listing_id: p
        for p in db.query(Property).filter(Property.account_id == account.id).all()
    }
    for listing in listings:
        mutable = {
            "name": (listing.name or "").strip() or f"Listing {listing.id}",
            "address": listing.address or "",
            "city": listing.city or "",
            "country": listing.country or "",
        }
        prop = existing.get(listing.id)
        if prop is None:
            prop = Property(
                account_id=account.id,
                hostaway_listing_id=listing.id,
                property_type=listing.property_type or DEFAULT_PROPERTY_TYPE,
                bedrooms=_whole(listing.bedrooms),
                bathrooms=_whole(listing.bathrooms),
                **mutable,
            )
            db.add(prop)
            existing[listing.id] = prop
            stats.created += 1
        elif _apply_changes(prop, mutable):
            stats.updated += 1
        else:
            stats.unchanged += 1
    db.flush()
    logger.info(
        "Reconciled %d listings for account %s (created=%d updated=%d)",
        stats.total, account.hostaway_account_id, stats.created, stats.updated,
    )
    return stats


def reconcile_reservations(
    db: Session,
    account: Account,
    reservations: list[ReservationDTO],
) -> tuple[list[Booking], ReconcileStats]:
    """Upsert bookings. Returns every booking the batch touched (new or existing) and stats."""
    stats = ReconcileStats()
    property_ids = {
        listing_id: prop_id
        for listing_id, prop_id in db.query(Property.hostaway_listing_id, Property.id)
        .filter(Property.account_id == account.id)
        .all()
    }
    existing = {
        b.hostaway_booking_id: b
        for b in db.query(Booking)
        .filter(
            Booking.account_id == account.id,
            Booking.hostaway_booking_id.in_([r.id for r in reservations]),
        )
        .all()
    }

    bookings: list[Booking] = []
    for res in reservations:
        property_id = property_ids.get(res.listing_map_id)
        if property_id is None:
            logger.warning(
                "Property not found for listing %s (reservation %s, account %s); skipping",
                res.listing_map_id, res.id, account.hostaway_account_id,
            )
            stats.skipped += 1
            continue
        if res.departure_date <= res.arrival_date:
            logger.warning(
                "Reservation %s has departure %s not after arrival %s; skipping",
                res.id, res.departure_date.isoformat(), res.arrival_date.isoformat(),
            )
            stats.skipped += 1
            continue

        booking = existing.get(res.id)
        if booking is None:
            booking = Booking(
                account_id=account.id,
                property_id=property_id,
                hostaway_booking_id=res.id,
                guest_name=res.guest_name or DEFAULT_GUEST_NAME,
                guest_email=res.guest_email,
                guest_phone=res.guest_phone,
                check_in=res.arrival_date,
                check_out=res.departure_date,
                number_of_guests=res.number_of_guests or 1,
                booking_status=res.status,
                total_price=res.total_price if res.total_price is not None else Decimal("0"),
                currency=res.currency or DEFAULT_CURRENCY,
            )
            db.add(booking)
            existing[res.id] = booking
            stats.created += 1
        else:
            if as_utc(booking.check_in) != res.arrival_date or as_utc(booking.check_out) != res.departure_date:
                # Dates are immutable after first insert; the external change is not applied
                logger.debug(
                    "Reservation %s dates changed upstream (%s..%s); keeping stored %s..%s",
                    res.id, res.arrival_date, res.departure_date, booking.check_in, booking.check_out,
                )
            if _apply_changes(booking, {"booking_status": res.status}):
                stats.updated += 1
            else:
                stats.unchanged += 1
        bookings.append(booking)

    db.flush()
    logger.info(
        "Reconciled %d reservations for account %s (created=%d updated=%d skipped=%d)",
        stats.total, account.hostaway_account_id, stats.created, stats.updated, stats.skipped,
    )
    return bookings, stats
