"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import psutil
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from motor.motor_asyncio import AsyncIOMotorDatabase
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from slowapi.errors import RateLimitExceeded

from jobboard.api.v1 import api_router
from jobboard.config import Settings, settings as default_settings
from jobboard.core.errors import register_exception_handlers
from jobboard.core.limiter import limiter, rate_limit_handler
from jobboard.core.logging import setup_logging
from jobboard.core.scheduler import create_scheduler, start_scheduler, stop_scheduler
from jobboard.core.security import TokenService
from jobboard.core.startup_checks import run_startup_checks
from jobboard.db.mongo import MongoDatabase, create_indexes
from jobboard.db.seed import seed_database
from jobboard.services.admin_service import AdminService
from jobboard.services.file_storage import PROFILES_DIR, FileStorage
from jobboard.services.file_sweeper import OrphanFileSweeper
from jobboard.services.job_store import JobStore
from jobboard.services.upload_service import UploadPipeline
from jobboard.services.user_store import UserStore

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry for error tracking (only if DSN is properly configured)."""
    if not (settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://")):
        logger.info("Sentry DSN not configured - error tracking disabled")
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=None,  # Capture all logs as breadcrumbs
                event_level="ERROR",  # Only send ERROR and above as events
            ),
        ],
        release=settings.APP_VERSION,
        attach_stacktrace=True,
        send_default_pii=False,
    )


async def init_services(app: FastAPI, settings: Settings, db: AsyncIOMotorDatabase) -> None:
    """Build every service once and hang it on app.state."""
    storage = FileStorage(settings.UPLOAD_DIR)
    storage.ensure_dirs()

    users = UserStore(db)
    jobs = JobStore(db)

    app.state.token_service = TokenService.from_settings(settings)
    app.state.file_storage = storage
    app.state.user_store = users
    app.state.job_store = jobs
    app.state.upload_pipeline = UploadPipeline(storage, users)
    app.state.admin_service = AdminService(users, jobs, storage)
    app.state.file_sweeper = OrphanFileSweeper(
        storage, users, grace_seconds=settings.SWEEP_GRACE_SECONDS
    )

    if settings.SEED_DATABASE:
        await seed_database(users, jobs)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[AsyncIOMotorDatabase] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration; the environment-derived settings by default
        database: An already-open database (tests); otherwise Motor connects
            to MONGODB_URI during startup
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        run_startup_checks(settings)

        mongo = None
        db = database
        if db is None:
            mongo = MongoDatabase.from_settings(settings)
            db = await mongo.initialize()
        else:
            await create_indexes(db)

        await init_services(app, settings, db)

        app.state.scheduler = None
        if settings.SWEEP_ENABLED:
            app.state.scheduler = create_scheduler()
            start_scheduler(app.state.scheduler, app.state.file_sweeper, settings.SWEEP_INTERVAL_MINUTES)

        logger.info(f"🚀 {settings.APP_NAME} started ({settings.ENVIRONMENT})")
        yield

        if app.state.scheduler is not None:
            stop_scheduler(app.state.scheduler)
        if mongo is not None:
            mongo.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Job board API: accounts, job postings, applications and profile files",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        swagger_ui_parameters={"persistAuthorization": True},
    )
    app.state.settings = settings
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    register_exception_handlers(app, debug=settings.DEBUG)

    app.include_router(api_router, prefix="/api/v1")

    # Profile pictures are public; resumes are only served through authenticated routes
    app.mount(
        f"/uploads/{PROFILES_DIR}",
        StaticFiles(directory=f"{settings.UPLOAD_DIR}/{PROFILES_DIR}", check_dir=False),
        name="profile-pictures",
    )

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint."""
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational",
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint with uptime and process memory."""
        memory = psutil.Process().memory_info()
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "uptime_seconds": round(time.time() - app.state.started_at, 1),
            "memory": {
                "rss_mb": round(memory.rss / (1024 * 1024), 1),
                "vms_mb": round(memory.vms / (1024 * 1024), 1),
            },
        }

    return app


def _build_default_app() -> FastAPI:
    setup_logging(default_settings.LOG_LEVEL, default_settings.LOG_FORMAT)
    init_sentry(default_settings)
    return create_app()


app = _build_default_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "jobboard.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.RELOAD and default_settings.ENVIRONMENT == "development",
    )
