"""Hostaway accounts and on-demand sync."""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from cleanops.config import load_configured_accounts
from cleanops.dependencies import get_db, get_sync_service, require_admin
from cleanops.errors import InvalidInput
from cleanops.models.account import Account
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.schemas.account import AccountResponse, AccountSyncResultResponse, SyncBatchResponse
from cleanops.services.auth import Actor
from cleanops.services.sync import SyncService
from cleanops.services.timeutil import utcnow

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountResponse])
def list_accounts(db: Session = Depends(get_db), actor: Actor = Depends(require_admin)):
    now = utcnow()
    out = []
    for account in db.query(Account).order_by(Account.id).all():
        properties_count = db.query(func.count(Property.id)).filter(Property.account_id == account.id).scalar()
        upcoming = (
            db.query(func.count(Booking.id))
            .filter(Booking.account_id == account.id, Booking.check_in >= now)
            .scalar()
        )
        out.append(
            AccountResponse(
                id=account.id,
                name=account.name,
                hostaway_account_id=account.hostaway_account_id,
                status=account.status,
                created_at=account.created_at,
                properties_count=properties_count or 0,
                upcoming_bookings=upcoming or 0,
            )
        )
    return out


@router.post("/sync", response_model=SyncBatchResponse)
def sync_accounts(
    sync_service: SyncService = Depends(get_sync_service),
    actor: Actor = Depends(require_admin),
):
    """Run a Hostaway sync for every configured account now. Per-account failures are reported, not raised."""
    accounts = load_configured_accounts()
    if not accounts:
        raise InvalidInput("No Hostaway accounts configured")
    batch = sync_service.sync_all(accounts, trigger="manual")
    if not batch.failed:
        status, message = "success", "Sync completed"
    elif batch.succeeded:
        status, message = "partial", f"Sync completed with {len(batch.failed)} failed account(s)"
    else:
        status, message = "failed", "Sync failed for all accounts"
    return SyncBatchResponse(
        message=message,
        status=status,
        results=[AccountSyncResultResponse.model_validate(r) for r in batch.results],
    )
