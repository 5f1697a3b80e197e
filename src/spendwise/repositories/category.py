"""Category repository."""
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.category import Category
from spendwise.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def get_visible(self, user_id: UUID, type: str | None = None) -> list[Category]:
        """Default categories plus the user's own, sorted by name."""
        stmt = select(Category).where(
            or_(Category.is_default == True, Category.created_by == user_id)  # noqa: E712
        )
        if type is not None:
            stmt = stmt.where(Category.type == type)
        result = await self.db.execute(stmt.order_by(Category.name))
        return list(result.scalars().all())

    async def get_default_names(self) -> set[tuple[str, str]]:
        """(name, type) pairs of the seeded default categories."""
        result = await self.db.execute(
            select(Category.name, Category.type).where(Category.is_default == True)  # noqa: E712
        )
        return {(row[0], row[1]) for row in result.all()}
