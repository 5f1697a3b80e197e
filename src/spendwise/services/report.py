"""Report service: income/expense aggregates computed from the log."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.config import settings
from spendwise.core.dates import month_bounds, utc_today
from spendwise.core.exceptions import InvalidSpecError
from spendwise.core.roles import Action
from spendwise.models.user import User
from spendwise.repositories.transaction import TransactionRepository
from spendwise.repositories.wallet import WalletRepository
from spendwise.schemas.common import MoneyMeta
from spendwise.schemas.report import (
    CategorySpending,
    CategorySpendingResult,
    FinancialSummary,
    WalletSummary,
)
from spendwise.services.membership import MembershipService

logger = logging.getLogger(__name__)


def _resolve_range(start: date | None, end: date | None) -> tuple[date, date]:
    """Default to the current calendar month; ``end`` is exclusive."""
    default_start, default_end = month_bounds(utc_today())
    start = start or default_start
    end = end or default_end
    if end <= start:
        raise InvalidSpecError(details={"field": "end", "reason": "must be after start"})
    return start, end


def _money() -> MoneyMeta:
    return MoneyMeta(currency=settings.currency, minor_unit=settings.currency_minor_unit)


class ReportService:
    """Service for financial summaries across and within wallets."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.membership = MembershipService(db)

    async def financial_summary(
        self, actor: User, start: date | None = None, end: date | None = None
    ) -> FinancialSummary:
        """Totals over every wallet the actor belongs to."""
        start, end = _resolve_range(start, end)
        wallet_ids = await self.wallet_repo.wallet_ids_for_user(actor.id)
        income, expenses, count = await self.transaction_repo.totals(wallet_ids, start, end)
        return FinancialSummary(
            total_income=income,
            total_expenses=expenses,
            net_cash_flow=income - expenses,
            transaction_count=count,
            wallet_count=len(wallet_ids),
            period_start=start,
            period_end=end,
            money=_money(),
        )

    async def wallet_summary(
        self, actor: User, wallet_id: UUID, start: date | None = None, end: date | None = None
    ) -> WalletSummary:
        """Totals of a single wallet (viewer+)."""
        await self.membership.require(actor, wallet_id, Action.VIEW)
        start, end = _resolve_range(start, end)
        income, expenses, count = await self.transaction_repo.totals([wallet_id], start, end)
        return WalletSummary(
            wallet_id=wallet_id,
            total_income=income,
            total_expenses=expenses,
            net_cash_flow=income - expenses,
            transaction_count=count,
            period_start=start,
            period_end=end,
            money=_money(),
        )

    async def category_spending(
        self, actor: User, wallet_id: UUID, start: date | None = None, end: date | None = None
    ) -> CategorySpendingResult:
        """Expense totals per category of a wallet, largest first (viewer+)."""
        await self.membership.require(actor, wallet_id, Action.VIEW)
        start, end = _resolve_range(start, end)
        rows = await self.transaction_repo.spending_by_category(wallet_id, start, end)
        return CategorySpendingResult(
            wallet_id=wallet_id,
            period_start=start,
            period_end=end,
            categories=[
                CategorySpending(
                    category_id=category.id,
                    name=category.name,
                    icon=category.icon,
                    color=category.color,
                    amount=total,
                    transaction_count=count,
                )
                for category, total, count in rows
            ],
            money=_money(),
        )
