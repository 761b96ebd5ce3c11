"""
Base repository with common CRUD operations.
"""

from contextlib import contextmanager
from typing import Any, Iterator, TypeVar, Generic, Type
from uuid import UUID

import structlog
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.exceptions import InvalidInputError, StorageError
from rolegate.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)

logger = structlog.get_logger()


def coerce_id(value: UUID | str) -> UUID:
    """Accept a UUID or its string form."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise InvalidInputError(f"Invalid id: {value!r}") from e


@contextmanager
def storage_errors(operation: str, **context: Any) -> Iterator[None]:
    """Re-raise driver and ORM failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Storage operation failed", operation=operation, error=str(e), **context)
        raise StorageError(f"{operation} failed: {e}") from e


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class RoleRepository(BaseRepository[Role]):
            model = Role

        repo = RoleRepository(db)
        role = await repo.get_by_id(role_id)
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self) -> Select:
        """Base query - override to add default filters or loader options."""
        return select(self.model)

    async def get_by_id(self, id: UUID | str) -> ModelT | None:
        """Get entity by ID."""
        stmt = self._base_query().where(self.model.id == coerce_id(id))
        with storage_errors(f"get {self.model.__name__}", id=str(id)):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def get_one(self, **filters) -> ModelT | None:
        """Get single entity by filters."""
        stmt = self._base_query()
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        with storage_errors(f"get {self.model.__name__}", **filters):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def all(self, order_by: str | None = None) -> list[ModelT]:
        """Get all entities (no pagination)."""
        stmt = self._base_query()
        if order_by:
            column = getattr(self.model, order_by, None)
            if column is not None:
                stmt = stmt.order_by(column)
        with storage_errors(f"list {self.model.__name__}"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def add(self, entity: ModelT) -> ModelT:
        """Persist a new entity (flush, no commit)."""
        self.db.add(entity)
        with storage_errors(f"create {self.model.__name__}"):
            await self.db.flush()
            await self.db.refresh(entity)
        return entity

    async def save(self, entity: ModelT) -> ModelT:
        """Flush pending changes on an existing entity."""
        with storage_errors(f"update {self.model.__name__}", id=str(entity.id)):
            await self.db.flush()
            await self.db.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        """Delete entity (hard delete)."""
        with storage_errors(f"delete {self.model.__name__}", id=str(entity.id)):
            await self.db.delete(entity)
            await self.db.flush()
