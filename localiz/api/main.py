"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from localiz import __version__
from localiz.adapters.geo.zippopotam import ZippopotamTownDirectory
from localiz.adapters.repository import PostgresPendingRegistrationRepository, run_migrations
from localiz.adapters.smtp.background import BackgroundEmailSender
from localiz.adapters.smtp.console import ConsoleEmailSender
from localiz.adapters.smtp.smtp import SmtpEmailSender
from localiz.adapters.smtp.templates import EmailComposer
from localiz.adapters.tokens.jwt_tokens import JwtTokenIssuer
from localiz.api.errors import add_exception_handlers
from localiz.api.routes import admin, blog, contact, deals, listings, ratings, users, utils
from localiz.config.logging import configure_logging
from localiz.config.settings import Settings, get_settings
from localiz.domain.ports import EmailSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {"name": "users", "description": "Registration, email confirmation, sessions and profile"},
    {"name": "admin", "description": "User management (admin only)"},
    {"name": "deals", "description": "Local deals and events"},
    {"name": "listings", "description": "Swap and donate listings"},
    {"name": "blog", "description": "Blog posts"},
    {"name": "ratings", "description": "User ratings"},
    {"name": "contact", "description": "Contact form"},
    {"name": "utils", "description": "Address helpers"},
]


def build_email_sender(settings: Settings) -> BackgroundEmailSender:
    """Select the mail backend and run it off the request path."""
    composer = EmailComposer(front_url=settings.front_url, support_email=settings.support_email)
    inner: EmailSender
    if settings.email_backend == "smtp":
        inner = SmtpEmailSender(
            composer,
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.email_from,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.smtp_timeout_seconds,
        )
    else:
        inner = ConsoleEmailSender(composer)
    return BackgroundEmailSender(
        inner, max_workers=settings.mail_workers, max_queued=settings.mail_max_queued
    )


PURGE_JOB_ID = "purge-expired-pending"


def purge_expired_pending(repository: PostgresPendingRegistrationRepository) -> int:
    """Delete expired pending registrations; failures are logged and retried next run."""
    try:
        removed = repository.purge_expired()
    except Exception:
        logger.exception("Pending registration purge failed")
        return 0
    if removed:
        logger.info("Purged %d expired pending registration(s)", removed)
    return removed


def build_scheduler(
    repository: PostgresPendingRegistrationRepository, interval_seconds: float
) -> BackgroundScheduler:
    """Scheduler running the pending-registration purge every ``interval_seconds``."""
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        purge_expired_pending,
        "interval",
        seconds=interval_seconds,
        args=[repository],
        id=PURGE_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Starts the mail workers and the pending-registration purge scheduler
    - Stops them and closes the connection pool on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )

    # Run migrations
    logger.info("Running database migrations...")
    run_migrations(pool)

    # Store pool and mailer in app state for dependency injection
    app.state.pool = pool
    email_sender = build_email_sender(settings)
    app.state.email_sender = email_sender

    scheduler = build_scheduler(
        PostgresPendingRegistrationRepository(pool, settings.pending_ttl_seconds),
        settings.pending_purge_interval_seconds,
    )
    scheduler.start()

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    scheduler.shutdown(wait=False)
    email_sender.shutdown(wait=True)
    pool.close()
    logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Configuration is read once here and turned into the immutable
    collaborators (registration policy, token issuer, town directory) shared by every
    request.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="localiz",
        description="Localiz API - Local deals, swap/donate listings and member accounts",
        version=__version__,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.policy = settings.registration_policy()
    app.state.tokens = JwtTokenIssuer(
        secret=settings.secret_key,
        algorithm=settings.jwt_algorithm,
        verification_ttl_seconds=settings.pending_ttl_seconds,
        session_ttl_seconds=settings.session_ttl_seconds,
    )
    app.state.town_directory = ZippopotamTownDirectory(
        base_url=settings.postal_lookup_url,
        timeout=settings.postal_lookup_timeout_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    add_exception_handlers(app)

    for module in (users, admin, deals, listings, blog, ratings, contact, utils):
        app.include_router(module.router)

    @app.get("/health", tags=["health"])
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        # Validate database connectivity
        pool = request.app.state.pool
        with pool.connection() as conn:
            conn.execute("SELECT 1")

        return {"status": "healthy"}

    return app


app = create_app()
