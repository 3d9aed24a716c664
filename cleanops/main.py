"""CleanOps – FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cleanops.config import Settings, get_settings, load_configured_accounts
from cleanops.database import init_db, make_engine, make_session_factory
from cleanops.errors import CleanOpsError
from cleanops.routers import accounts, analytics, auth, bookings, notifications, tasks, workers
from cleanops.seed import seed_accounts
from cleanops.services.cache import ListingsCache
from cleanops.services.hostaway import HostawayClient
from cleanops.services.notifications import NotificationDispatcher
from cleanops.services.scheduler import build_scheduler
from cleanops.services.sync import SyncService

logger = logging.getLogger("uvicorn.error")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)
    cache = ListingsCache.from_url(settings.redis_url, settings.listings_cache_ttl_seconds)
    dispatcher = NotificationDispatcher(settings)
    sync_service = SyncService(
        session_factory,
        lambda creds: HostawayClient.for_account(creds, settings, cache),
        settings,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.dispatcher = dispatcher
    app.state.sync_service = sync_service
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(accounts.router)
    app.include_router(bookings.router)
    app.include_router(tasks.router)
    app.include_router(workers.router)
    app.include_router(notifications.router)
    app.include_router(analytics.router)

    @app.exception_handler(CleanOpsError)
    def handle_cleanops_error(request: Request, exc: CleanOpsError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.on_event("startup")
    def startup():
        init_db(engine)
        if settings.seed_accounts_on_startup:
            db = session_factory()
            try:
                seed_accounts(db, load_configured_accounts())
            finally:
                db.close()
        if settings.scheduler_enabled:
            scheduler = build_scheduler(settings, session_factory, sync_service, dispatcher)
            scheduler.start()
            app.state.scheduler = scheduler
            logger.info("Scheduler started: sync every %d min, reminders hourly", settings.sync_interval_minutes)

    @app.on_event("shutdown")
    def shutdown():
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)

    @app.get("/")
    def root():
        return {"app": settings.app_name, "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
