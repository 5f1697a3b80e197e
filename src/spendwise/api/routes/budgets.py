"""Budget endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.config import settings
from spendwise.models.user import User
from spendwise.schemas.budget import (
    BudgetCreate,
    BudgetListResult,
    BudgetPeriod,
    BudgetResponse,
    BudgetStatus,
    BudgetUpdate,
    BudgetWithStatus,
)
from spendwise.schemas.common import MoneyMeta
from spendwise.services.budget import BudgetService

router = APIRouter(tags=["budgets"])


@router.get(
    "/budgets",
    response_model=BudgetListResult,
    summary="List budgets with status",
    description="Active budgets of one wallet, or of every wallet the caller belongs to.",
)
async def list_budgets(
    wallet_id: UUID | None = Query(None, description="Restrict to one wallet"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BudgetListResult:
    rows = await BudgetService(db).list_budgets(current_user, wallet_id=wallet_id)
    return BudgetListResult(
        budgets=[
            BudgetWithStatus(**BudgetResponse.model_validate(budget).model_dump(), status=budget_status)
            for budget, budget_status in rows
        ],
        money=MoneyMeta(currency=settings.currency, minor_unit=settings.currency_minor_unit),
    )


@router.post(
    "/budgets",
    response_model=BudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a budget",
    description="Set a spending limit for an expense category of a wallet (manager or owner).",
)
async def create_budget(
    payload: BudgetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BudgetResponse:
    budget = await BudgetService(db).create_budget(current_user, payload)
    return BudgetResponse.model_validate(budget)


@router.put(
    "/budgets/{budget_id}",
    response_model=BudgetResponse,
    summary="Update a budget",
)
async def update_budget(
    budget_id: UUID,
    payload: BudgetUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BudgetResponse:
    budget = await BudgetService(db).update_budget(current_user, budget_id, payload)
    return BudgetResponse.model_validate(budget)


@router.delete(
    "/budgets/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a budget",
)
async def delete_budget(
    budget_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await BudgetService(db).delete_budget(current_user, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/wallets/{wallet_id}/budgets/status",
    response_model=BudgetStatus,
    summary="Get budget status",
    description="""
    Spent, remaining and percentage of the wallet's budget for a category,
    recomputed from the transactions of the period containing **on**
    (today by default). Percentage is not clamped and exceeds 100 when
    over budget.
    """,
)
async def get_budget_status(
    wallet_id: UUID,
    category_id: UUID = Query(..., description="Expense category"),
    period: BudgetPeriod = Query("monthly", description="Budget period"),
    on: date | None = Query(None, description="Day inside the period (defaults to today)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BudgetStatus:
    return await BudgetService(db).budget_status(current_user, wallet_id, category_id, period, on)
