"""Category catalog service."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.exceptions import InvalidSpecError, NotFoundError
from spendwise.models.category import Category
from spendwise.models.user import User
from spendwise.repositories.category import CategoryRepository
from spendwise.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

CATEGORY_TYPES = ("income", "expense")

# (name, type, icon, color)
DEFAULT_CATEGORIES: list[tuple[str, str, str, str]] = [
    ("Salary", "income", "fas fa-briefcase", "#22c55e"),
    ("Freelance", "income", "fas fa-laptop", "#3b82f6"),
    ("Investment", "income", "fas fa-chart-line", "#8b5cf6"),
    ("Business", "income", "fas fa-building", "#06b6d4"),
    ("Other Income", "income", "fas fa-plus-circle", "#10b981"),
    ("Food & Dining", "expense", "fas fa-utensils", "#f59e0b"),
    ("Transportation", "expense", "fas fa-car", "#ef4444"),
    ("Shopping", "expense", "fas fa-shopping-bag", "#8b5cf6"),
    ("Entertainment", "expense", "fas fa-film", "#06b6d4"),
    ("Bills & Utilities", "expense", "fas fa-file-invoice-dollar", "#64748b"),
    ("Healthcare", "expense", "fas fa-heart", "#dc2626"),
    ("Education", "expense", "fas fa-graduation-cap", "#7c3aed"),
    ("Travel", "expense", "fas fa-plane", "#059669"),
    ("Home & Garden", "expense", "fas fa-home", "#d97706"),
    ("Personal Care", "expense", "fas fa-spa", "#be185d"),
    ("Other Expenses", "expense", "fas fa-minus-circle", "#6b7280"),
]


class CategoryService:
    """Service for reading and maintaining categories."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.category_repo = CategoryRepository(db)

    async def list_categories(self, actor: User, type: str | None = None) -> list[Category]:
        """Default categories plus the actor's own, optionally filtered by type."""
        if type is not None and type not in CATEGORY_TYPES:
            raise InvalidSpecError(details={"field": "type", "value": type})
        return await self.category_repo.get_visible(actor.id, type=type)

    async def create_category(self, actor: User, data: CategoryCreate) -> Category:
        """Create a custom category owned by the actor."""
        name = data.name.strip()
        if not name:
            raise InvalidSpecError(details={"field": "name", "reason": "must not be blank"})
        if data.type not in CATEGORY_TYPES:
            raise InvalidSpecError(details={"field": "type", "value": data.type})

        try:
            category = await self.category_repo.add(
                Category(
                    name=name,
                    type=data.type,
                    icon=data.icon,
                    color=data.color,
                    is_default=False,
                    created_by=actor.id,
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Category created", extra={"category_id": str(category.id), "type": category.type})
        return category

    async def update_category(self, actor: User, category_id: UUID, data: CategoryUpdate) -> Category:
        """Apply cosmetic edits (name, icon, color) to the actor's own category.

        Raises:
            NotFoundError: If the category does not exist (API_007) or was not
                created by the actor (API_009)
        """
        category = await self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFoundError("API_007", details={"category_id": str(category_id)})
        if category.is_default or category.created_by != actor.id:
            raise NotFoundError("API_009", details={"category_id": str(category_id)})

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise InvalidSpecError(details={"field": "name", "reason": "must not be blank"})

        try:
            await self.category_repo.update(category, changes)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(category)
        return category

    async def seed_default_categories(self) -> int:
        """Insert any missing default categories.

        Safe to run repeatedly; existing defaults are left alone.

        Returns:
            Number of categories inserted
        """
        existing = await self.category_repo.get_default_names()
        created = 0
        try:
            for name, type_, icon, color in DEFAULT_CATEGORIES:
                if (name, type_) in existing:
                    continue
                await self.category_repo.add(
                    Category(name=name, type=type_, icon=icon, color=color, is_default=True)
                )
                created += 1
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if created:
            logger.info("Default categories seeded", extra={"created_count": created})
        return created
