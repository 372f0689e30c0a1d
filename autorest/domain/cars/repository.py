from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.domain.cars.models import Car
from autorest.infrastructure.database.repository import BaseRepository


class CarRepository(BaseRepository[Car]):
    """Repository of cars with a make lookup."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Car)

    async def find_by_make_ignoring_case(self, make: str) -> list[Car]:
        """Return every car whose make equals ``make`` in any letter case.

        Args:
            make: Make to look up, e.g. ``"honda"`` matches ``"Honda"``.

        Returns:
            list[Car]: Matching cars ordered by ID.
        """
        cars = await self.filter_by_ignoring_case("make", make)
        logger.debug("Found {} cars with make '{}'", len(cars), make)
        return cars
