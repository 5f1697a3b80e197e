"""Base repository with generic CRUD operations.

Repositories never commit: the calling service owns the unit of work and
decides when to commit or roll back.
"""
from typing import Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Generic repository providing CRUD operations for any model."""

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: UUID, fresh: bool = False) -> T | None:
        """Get a single record by ID.

        ``fresh`` re-reads the row even when it is already in the identity
        map (used when retrying after a concurrent write).
        """
        stmt = select(self.model).where(self.model.id == id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, obj: T) -> T:
        """Stage a new record and flush it so defaults and FKs are checked."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def update(self, obj: T, data: dict) -> T:
        """Apply ``data`` to a loaded record and flush."""
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        await self.db.flush()
        return obj

    async def delete(self, obj: T) -> None:
        """Delete a loaded record and flush."""
        await self.db.delete(obj)
        await self.db.flush()
