from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.studio.api.middlewares import setup_middlewares
from src.studio.api.v1.router import api_router
from src.studio.core.config import get_settings
from src.studio.core.db import SessionFactory, create_tables, dispose_engine, make_session_factory
from src.studio.core.error_classifier import ErrorClassifier, ErrorHistory
from src.studio.core.exceptions import setup_exception_handlers
from src.studio.core.health import setup_health_endpoint, setup_metrics
from src.studio.core.logging import get_logger, setup_logging
from src.studio.services import EntityAccessService, EntityCache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", env=settings.app_env)

    if settings.auto_create_tables and app.state.owns_engine:
        await create_tables()

    yield

    logger.info("Closing connections...")
    if app.state.owns_engine:
        await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "projects", "description": "Extension projects, their files and settings"},
    {"name": "conversations", "description": "Assistant conversations and messages"},
    {"name": "errors", "description": "Error history and recovery guidance"},
]


def create_app(session_factory: SessionFactory | None = None) -> FastAPI:
    """Build the application and its process-wide services.

    Args:
        session_factory: Sessions for every storage call. Defaults to one bound
            to the engine from ``DATABASE_URL``; tests pass their own.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Extension studio API: resilient project and conversation access",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    app.state.owns_engine = session_factory is None
    app.state.session_factory = session_factory or make_session_factory()
    app.state.error_history = ErrorHistory(settings.error_history_size)
    app.state.classifier = ErrorClassifier(app.state.error_history)
    app.state.cache = EntityCache()
    app.state.access_service = EntityAccessService(
        app.state.session_factory,
        app.state.cache,
        app.state.classifier,
        retry_network=settings.aggregate_network_retry,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
