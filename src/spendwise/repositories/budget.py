"""Budget repository."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.budget import Budget
from spendwise.repositories.base import BaseRepository


class BudgetRepository(BaseRepository[Budget]):
    """Repository for Budget model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Budget)

    async def get_for_category(
        self, wallet_id: UUID, category_id: UUID, period: str
    ) -> Budget | None:
        """Budget configured for a wallet/category/period."""
        result = await self.db.execute(
            select(Budget).where(
                Budget.wallet_id == wallet_id,
                Budget.category_id == category_id,
                Budget.period == period,
            )
        )
        return result.scalar_one_or_none()

    async def get_active_by_wallets(self, wallet_ids: list[UUID]) -> list[Budget]:
        """Active budgets of the given wallets, oldest first."""
        if not wallet_ids:
            return []
        result = await self.db.execute(
            select(Budget)
            .where(Budget.wallet_id.in_(wallet_ids), Budget.is_active == True)  # noqa: E712
            .order_by(Budget.created_at)
        )
        return list(result.scalars().all())
