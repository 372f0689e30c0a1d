"""FastAPI application factory and lifecycle.

Startup runs, in order:
1. Database connectivity check (``RuntimeError`` if unreachable)
2. Alembic migrations to ``head`` when enabled (``MigrationError`` if they fail)

Either failure aborts startup, so the application never serves traffic
against a missing or outdated schema. Shutdown disposes the engine.

Middleware are executed in reverse order of registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from autorest.api.middleware.error_handler import register_exception_handlers
from autorest.api.middleware.request_context import RequestContextMiddleware
from autorest.api.middleware.request_logging import RequestLoggingMiddleware
from autorest.api.routes import actuator, config
from autorest.api.routes.entities import RESOURCES
from autorest.api.routes.resources import create_resource_router
from autorest.api.routes.root import create_root_router
from autorest.api.utils.responses import ORJSONResponse
from autorest.core.config import Settings, get_settings
from autorest.core.logging import setup_logging
from autorest.core.observability import instrument_app, setup_tracing
from autorest.infrastructure.database.migrations import run_migrations
from autorest.infrastructure.database.session import (
    check_database_connection,
    close_database,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Raises:
        RuntimeError: If the database is unreachable during startup.
        MigrationError: If migrations cannot be applied.
    """
    settings: Settings = app_instance.state.settings

    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        await close_database()
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)
    logger.info(
        "Database connection successful ({})", settings.database_config.backend
    )

    if settings.database_config.run_migrations_on_startup:
        try:
            await run_migrations()
        except Exception:
            await close_database()
            raise
    else:
        logger.warning("Startup migrations are disabled")

    logger.info(
        "Application startup complete - {} v{} ({})",
        app_instance.title,
        app_instance.version,
        settings.app_title,
    )

    yield

    logger.info("Application shutdown initiated")
    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The given settings shape the application object: title, version, docs
    URLs, logging, tracing and request logging. The database layer and the
    exception handlers read ``get_settings()`` at runtime, so a settings
    instance that differs from the environment does not change which
    database is checked and migrated at startup.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=settings.app_title,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Handlers before middleware
    register_exception_handlers(application)

    application.add_middleware(RequestLoggingMiddleware, settings=settings)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(create_root_router(RESOURCES))
    for resource in RESOURCES:
        application.include_router(create_resource_router(resource))
    application.include_router(config.router)
    application.include_router(actuator.router)

    instrument_app(application, settings)

    return application


app = create_app()
