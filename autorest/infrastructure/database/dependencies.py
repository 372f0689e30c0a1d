"""FastAPI dependency providing one database session per request.

The session is committed when the route returns normally and rolled back if
it raises; route handlers only flush through their repository.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a request-scoped session.

    Example:
        @router.get("/cats/{cat_id}")
        async def read_cat(cat_id: int, db: DatabaseSession) -> dict[str, str]:
            ...
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
