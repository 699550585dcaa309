"""FastAPI application for the lead capture service."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from leadcapture import __version__
from leadcapture.config.settings import Settings
from leadcapture.lib.exceptions import StoreError
from leadcapture.submissions.endpoints import router as submissions_router
from leadcapture.submissions.notifier import Notifier
from leadcapture.submissions.store import SubmissionStore
from leadcapture.utils.logger import get_logger


# Initialize logger for API diagnostics
api_logger = get_logger("api")


def init_collaborators(app: FastAPI) -> None:
    """
    Build the store and notifier once per process.

    Collaborators already placed on ``app.state`` are kept as they are.
    """
    settings: Settings = app.state.settings

    if getattr(app.state, "store", None) is None:
        try:
            store = SubmissionStore.from_url(settings.DATABASE_URL, settings.TABLE_NAME)
        except StoreError as e:
            # Unusable DATABASE_URL: the app still starts and submissions answer 500
            api_logger.error("store_config_invalid", extra={"data": {"error": e.message, **e.details}})
            store = None

        if store is not None:
            try:
                store.create_tables()
                api_logger.info("store_initialized", extra={"data": {"table": settings.TABLE_NAME}})
            except StoreError as e:
                # Table creation is retried on the first save
                api_logger.warning("store_init_deferred", extra={"data": {"error": e.message, **e.details}})
            app.state.store = store

    if getattr(app.state, "notifier", None) is None:
        missing = settings.missing_email_settings()
        if missing:
            api_logger.warning("email_settings_missing", extra={"data": {"missing": missing}})
        app.state.notifier = Notifier.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Lifespan context manager for startup/shutdown."""
    init_collaborators(app)

    yield

    store = getattr(app.state, "store", None)
    if store is not None:
        store.close()
    api_logger.info("shutdown")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SubmissionStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (default: read from environment)
        store: Pre-built store; built at startup when omitted
        notifier: Pre-built notifier; built at startup when omitted

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Lead Capture API",
        description="Contact and catering-request form backend",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings or Settings()
    app.state.store = store
    app.state.notifier = notifier

    app.include_router(submissions_router, tags=["Submissions"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "store_configured": app.state.store is not None,
            "notifier_configured": app.state.notifier is not None,
            "email_configured": not app.state.settings.missing_email_settings(),
        }

    return app


app = create_app()
