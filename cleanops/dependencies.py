"""Shared dependencies: DB session, settings, current actor, injected services."""
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from cleanops.config import Settings
from cleanops.database import get_db  # noqa: F401  (re-exported for routers)
from cleanops.services.auth import Actor, actor_from_payload, decode_token_with_error
from cleanops.services.notifications import NotificationDispatcher
from cleanops.services.sync import SyncService

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_sync_service(request: Request) -> SyncService:
    return request.app.state.sync_service


def get_current_actor(
    settings: Settings = Depends(get_app_settings),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Actor:
    if not credentials:
        raise HTTPException(status_code=401, detail="Access token required")
    payload, _ = decode_token_with_error(settings, (credentials.credentials or "").strip())
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    actor = actor_from_payload(payload)
    if actor is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return actor


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return actor


def require_worker(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_worker:
        raise HTTPException(status_code=403, detail="Worker role required")
    return actor
