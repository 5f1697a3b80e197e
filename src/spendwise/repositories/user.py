"""User repository for identity lookups."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.user import User
from spendwise.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model with identity queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_subject(self, subject: str) -> User | None:
        """Find user by identity-provider subject."""
        result = await self.db.execute(select(User).where(User.subject == subject))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Find user by email address (case-insensitive)."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()
