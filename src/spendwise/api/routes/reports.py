"""Financial report endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.models.user import User
from spendwise.schemas.report import CategorySpendingResult, FinancialSummary, WalletSummary
from spendwise.services.report import ReportService

router = APIRouter(tags=["reports"])


@router.get(
    "/reports/financial-summary",
    response_model=FinancialSummary,
    summary="Financial summary across wallets",
    description="Income, expenses and net cash flow over all the caller's wallets. Defaults to the current month.",
)
async def financial_summary(
    start_date: date | None = Query(None, description="First day (inclusive)"),
    end_date: date | None = Query(None, description="Last day (exclusive)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FinancialSummary:
    return await ReportService(db).financial_summary(current_user, start_date, end_date)


@router.get(
    "/wallets/{wallet_id}/summary",
    response_model=WalletSummary,
    summary="Wallet income/expense summary",
)
async def wallet_summary(
    wallet_id: UUID,
    start_date: date | None = Query(None, description="First day (inclusive)"),
    end_date: date | None = Query(None, description="Last day (exclusive)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> WalletSummary:
    return await ReportService(db).wallet_summary(current_user, wallet_id, start_date, end_date)


@router.get(
    "/wallets/{wallet_id}/category-spending",
    response_model=CategorySpendingResult,
    summary="Wallet spending by category",
)
async def category_spending(
    wallet_id: UUID,
    start_date: date | None = Query(None, description="First day (inclusive)"),
    end_date: date | None = Query(None, description="Last day (exclusive)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CategorySpendingResult:
    return await ReportService(db).category_spending(current_user, wallet_id, start_date, end_date)
