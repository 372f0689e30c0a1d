"""Shared fixtures for integration tests.

Every test gets its own SQLite database file under ``tmp_path``. The
``client`` fixture enters the application lifespan, so the connectivity
check and the Alembic migrations run exactly as they do in production.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from contextlib import AbstractAsyncContextManager

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.api.main import create_app
from autorest.core.config import get_settings
from autorest.core.context import RequestContext
from autorest.core.logging import _state
from autorest.core.metrics import get_metrics
from autorest.infrastructure.database.session import (
    _db_manager,
    close_database,
    get_async_session,
)

type SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@pytest.fixture(autouse=True)
def database_url(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point the application at a fresh SQLite file for this test."""
    db_file = tmp_path_factory.mktemp("db") / "autorest.db"
    url = f"sqlite+aiosqlite:///{db_file}"
    monkeypatch.setenv("DATABASE_CONFIG__DATABASE_URL", url)
    return url


@pytest.fixture(autouse=True)
def clear_settings_cache(database_url: str) -> Generator[None]:
    """Rebuild settings after the per-test environment is in place."""
    _ = database_url
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def reset_logging_and_metrics() -> Generator[None]:
    """Keep log output out of the test run and start with empty metrics.

    Logging stays marked as configured so app creation does not add stdout
    handlers.
    """
    logger.remove()
    _state.configured = True
    get_metrics().reset()

    yield

    logger.remove()
    get_metrics().reset()


@pytest.fixture(autouse=True)
async def clean_database_connections() -> AsyncGenerator[None]:
    """Dispose the engine so the next test builds one for its own database."""
    yield

    if _db_manager._engine is not None:
        await close_database()
    else:
        _db_manager.reset()


@pytest.fixture
def app() -> FastAPI:
    """A fresh application built from the current environment."""
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Client for an application whose startup has completed."""
    async with app.router.lifespan_context(app):
        # Unhandled errors are answered by the 500 handler and then re-raised
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def db_session(client: AsyncClient) -> SessionFactory:
    """Open sessions on the application's migrated database.

    Sessions commit when the block exits normally.
    """
    _ = client
    return get_async_session
