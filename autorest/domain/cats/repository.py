from sqlalchemy.ext.asyncio import AsyncSession

from autorest.domain.cats.models import Cat
from autorest.infrastructure.database.repository import BaseRepository


class CatRepository(BaseRepository[Cat]):
    """Paged repository of cats."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Cat)
