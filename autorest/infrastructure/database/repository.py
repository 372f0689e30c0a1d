"""Generic async repository for SQLAlchemy models.

``BaseRepository`` implements the CRUD, paging, sorting and filtering
operations shared by every exposed resource. Entity repositories subclass it
and add their own derived queries.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from sqlalchemy import Select, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from autorest.core.exceptions import ConflictError, ValidationError
from autorest.infrastructure.database.base import BaseModel

DEFAULT_PAGINATION_LIMIT = 100

# (property name, descending)
type SortOrder = tuple[str, bool]


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class CatRepository(BaseRepository[Cat]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Cat)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class
        logger.debug("Initialized repository for {}", model_class.__name__)

    @property
    def _name(self) -> str:
        return self.model_class.__name__

    def _column(self, field: str) -> InstrumentedAttribute[Any]:
        """Resolve a mapped column by property name.

        Raises:
            ValidationError: If the model has no such column.
        """
        if field not in self.model_class.__table__.columns:
            msg = f"No property '{field}' found for type '{self._name}'"
            raise ValidationError(msg, context={"property": field})
        return getattr(self.model_class, field)

    def _apply_sort(self, stmt: Select[Any], sort: Sequence[SortOrder]) -> Select[Any]:
        for field, descending in sort:
            column = self._column(field)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        # Stable order across pages
        return stmt.order_by(self.model_class.id)

    async def _flush(self) -> None:
        """Flush pending changes, translating constraint violations.

        Raises:
            ConflictError: If the database rejects the change.
        """
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning("Integrity violation on {}: {}", self._name, e.orig)
            msg = f"{self._name} violates a database constraint"
            raise ConflictError(msg, context={"entity": self._name}, cause=e) from e

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        logger.debug(
            "{} {} by ID: {}", "Found" if instance else "Missing", self._name, entity_id
        )
        return instance

    async def get_all(
        self,
        skip: int = 0,
        limit: int | None = DEFAULT_PAGINATION_LIMIT,
        sort: Sequence[SortOrder] = (),
    ) -> list[T]:
        """Retrieve model instances in a stable order.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return, None for all.
            sort: Sort orders applied before the ID tie-breaker.

        Returns:
            list[T]: List of model instances.
        """
        stmt = self._apply_sort(select(self.model_class), sort).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        logger.debug(
            "Retrieved {} {} instances (skip={}, limit={})",
            len(instances),
            self._name,
            skip,
            limit,
        )
        return instances

    async def get_page(
        self, page: int, size: int, sort: Sequence[SortOrder] = ()
    ) -> tuple[list[T], int]:
        """Retrieve one zero-based page together with the total count.

        Pages past the last row are empty without querying, so an offset
        too large for the driver's integer type never reaches the database.

        Returns:
            tuple[list[T], int]: The page's instances and the total number of rows.

        Raises:
            ValidationError: If a sort field is not a column of the model.
        """
        total = await self.count()
        skip = page * size
        if skip >= total:
            for field, _ in sort:
                self._column(field)
            return [], total

        items = await self.get_all(skip=skip, limit=size, sort=sort)
        return items, total

    async def create(self, obj: T) -> T:
        """Persist a new instance and load its generated values.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        self.session.add(obj)
        await self._flush()
        await self.session.refresh(obj)

        logger.info("Created {} instance with ID: {}", self._name, obj.id)
        return obj

    async def update(self, entity_id: int, data: Mapping[str, object]) -> T | None:
        """Update a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to update.
            data: Fields to assign; unknown fields are ignored with a warning.

        Returns:
            T | None: The updated model instance if found, None otherwise.
        """
        instance = await self.get_by_id(entity_id)
        if instance is None:
            return None

        for key, value in data.items():
            if key in self.model_class.__table__.columns and key != "id":
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self._name,
                )

        await self._flush()
        await self.session.refresh(instance)

        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self._name,
            entity_id,
            list(data.keys()),
        )
        return instance

    async def delete(self, entity_id: int) -> bool:
        """Delete a model instance by its ID.

        Returns:
            bool: True if the instance was deleted, False if not found.
        """
        stmt = sql_delete(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        deleted = result.rowcount > 0

        if deleted:
            logger.info("Deleted {} instance with ID: {}", self._name, entity_id)
        return deleted

    async def count(self) -> int:
        """Count all instances of the model."""
        stmt = select(func.count()).select_from(self.model_class)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, entity_id: int) -> bool:
        """Check if a model instance exists by its ID."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.id == entity_id)
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return instances whose columns equal all the given values.

        Raises:
            ValidationError: If a filter names an unknown column.
        """
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(self._column(field) == value)

        result = await self.session.execute(stmt.order_by(self.model_class.id))
        return list(result.scalars().all())

    async def filter_by_ignoring_case(self, field: str, value: str) -> list[T]:
        """Return instances whose string column equals ``value`` in any case.

        Raises:
            ValidationError: If ``field`` names an unknown column.
        """
        stmt = (
            select(self.model_class)
            .where(func.lower(self._column(field)) == value.lower())
            .order_by(self.model_class.id)
        )
        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        logger.debug(
            "Filtered {} by {} ignoring case - found {}",
            self._name,
            field,
            len(instances),
        )
        return instances
