"""Transaction repository with ledger replay and aggregation queries."""
from datetime import date
from uuid import UUID

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.category import Category
from spendwise.models.transaction import Transaction
from spendwise.repositories.base import BaseRepository

# Balance effect of a row: income adds, expense subtracts, reversals flip it.
SIGNED_AMOUNT = case(
    (and_(Transaction.type == "income", Transaction.reversal_of_id.is_(None)), Transaction.amount),
    (and_(Transaction.type == "expense", Transaction.reversal_of_id.is_not(None)), Transaction.amount),
    else_=-Transaction.amount,
)

# Contribution of a row to its own type's total (reversals subtract).
NET_AMOUNT = case(
    (Transaction.reversal_of_id.is_(None), Transaction.amount),
    else_=-Transaction.amount,
)


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model with filtering and analytics queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def get_by_wallet(
        self,
        wallet_id: UUID,
        skip: int = 0,
        limit: int = 50,
        since: date | None = None,
    ) -> list[Transaction]:
        """Get a wallet's transactions, newest first."""
        stmt = select(Transaction).where(Transaction.wallet_id == wallet_id)
        if since is not None:
            stmt = stmt.where(Transaction.txn_date >= since)
        result = await self.db.execute(
            stmt.order_by(Transaction.txn_date.desc(), Transaction.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_reversal_of(self, transaction_id: UUID) -> Transaction | None:
        """Find the entry that reverses ``transaction_id``, if any."""
        result = await self.db.execute(
            select(Transaction).where(Transaction.reversal_of_id == transaction_id)
        )
        return result.scalar_one_or_none()

    async def signed_sum(self, wallet_id: UUID) -> int:
        """Replay the wallet's log into a balance (minor units)."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(SIGNED_AMOUNT), 0)).where(
                Transaction.wallet_id == wallet_id
            )
        )
        return int(result.scalar_one())

    async def spent_in_range(
        self, wallet_id: UUID, category_id: UUID, start: date, end: date
    ) -> int:
        """Net expense amount of a category within ``[start, end)``."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(NET_AMOUNT), 0)).where(
                Transaction.wallet_id == wallet_id,
                Transaction.category_id == category_id,
                Transaction.type == "expense",
                Transaction.txn_date >= start,
                Transaction.txn_date < end,
            )
        )
        return int(result.scalar_one())

    async def totals(
        self, wallet_ids: list[UUID], start: date, end: date
    ) -> tuple[int, int, int]:
        """
        Aggregate income, expenses and entry count over wallets.
        Returns (income, expenses, count) in minor units within ``[start, end)``.
        """
        if not wallet_ids:
            return 0, 0, 0
        income = func.coalesce(
            func.sum(case((Transaction.type == "income", NET_AMOUNT), else_=0)), 0
        )
        expenses = func.coalesce(
            func.sum(case((Transaction.type == "expense", NET_AMOUNT), else_=0)), 0
        )
        result = await self.db.execute(
            select(income, expenses, func.count(Transaction.id)).where(
                Transaction.wallet_id.in_(wallet_ids),
                Transaction.txn_date >= start,
                Transaction.txn_date < end,
            )
        )
        row = result.one()
        return int(row[0]), int(row[1]), int(row[2])

    async def spending_by_category(
        self, wallet_id: UUID, start: date, end: date
    ) -> list[tuple[Category, int, int]]:
        """
        Aggregate expense totals per category, largest first.
        Returns (category, total, entry count) tuples.
        """
        total = func.sum(NET_AMOUNT).label("total")
        result = await self.db.execute(
            select(Category, total, func.count(Transaction.id))
            .join(Category, Category.id == Transaction.category_id)
            .where(
                Transaction.wallet_id == wallet_id,
                Transaction.type == "expense",
                Transaction.txn_date >= start,
                Transaction.txn_date < end,
            )
            .group_by(Category.id)
            .order_by(total.desc())
        )
        return [(row[0], int(row[1]), int(row[2])) for row in result.all()]
