"""
Base repository with common CRUD operations.

Provides generic database operations for all feature repositories.
Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class BadgeDefinitionRepository(BaseRepository[BadgeDefinition]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, BadgeDefinition)

        async def get_by_code(self, code: str) -> BadgeDefinition | None:
            return await self.get_by(code=code)
"""

from typing import TypeVar, Generic, Type
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    Lookups use populate_existing so that rows already in the session's
    identity map are refreshed from the database. Progress and award rows
    are compare-and-set on their version column, so a stale in-memory copy
    would turn every later write into a conflict.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            db: Async database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def _select(self, **kwargs):
        query = select(self.model).execution_options(populate_existing=True)
        for key, value in kwargs.items():
            column = getattr(self.model, key)
            query = query.where(column.is_(None) if value is None else column == value)
        return query

    async def get_by_id(self, id: str | int) -> T | None:
        """
        Get entity by primary key ID.

        Returns:
            Entity if found, None otherwise
        """
        return await self.get_by(id=id)

    async def get_by(self, **kwargs) -> T | None:
        """
        Get single entity by arbitrary field values.

        A None value matches SQL NULL.

        Returns:
            Matching entity or None
        """
        result = await self.db.execute(self._select(**kwargs))
        return result.scalar_one_or_none()

    async def get_all(self, **kwargs) -> list[T]:
        """Get all entities matching field values."""
        result = await self.db.execute(self._select(**kwargs))
        return list(result.scalars().all())

    async def create(self, **kwargs) -> T:
        """
        Create new entity.

        Flushes immediately so unique-constraint violations surface here
        as IntegrityError.

        Returns:
            Created entity with generated ID
        """
        entity = self.model(**kwargs)
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def update(self, entity: T, **kwargs) -> T:
        """
        Update entity fields and flush.

        Versioned models raise StaleDataError here when the row changed
        since it was read.

        Returns:
            Updated entity
        """
        for key, value in kwargs.items():
            setattr(entity, key, value)
        await self.db.flush()
        return entity
