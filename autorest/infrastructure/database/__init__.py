"""Database access with async SQLAlchemy and Alembic migrations.

Core components:
- **base**: Declarative base and common model fields
- **session**: Async engine and session management
- **repository**: Generic repository with CRUD, paging and filtering
- **dependencies**: FastAPI session dependency
- **migrations**: Startup migration runner
"""

from autorest.infrastructure.database.base import Base, BaseModel
from autorest.infrastructure.database.dependencies import DatabaseSession, get_db
from autorest.infrastructure.database.repository import BaseRepository
from autorest.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_async_session,
    get_engine,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "get_async_session",
    "get_db",
    "get_engine",
]
