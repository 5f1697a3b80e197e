"""Budget request/response schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from spendwise.schemas.common import MoneyMeta, StoredAmount

BudgetPeriod = Literal["weekly", "monthly", "yearly"]


class BudgetCreate(BaseModel):
    """Request model for creating a budget."""

    wallet_id: UUID
    category_id: UUID = Field(description="Expense category the limit applies to")
    amount: Decimal = Field(description="Spending limit per period in major units")
    period: BudgetPeriod = "monthly"


class BudgetUpdate(BaseModel):
    """Request model for updating a budget. Omitted fields stay unchanged."""

    amount: Decimal | None = None
    period: BudgetPeriod | None = None
    is_active: bool | None = None


class BudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    wallet_id: UUID
    category_id: UUID
    amount: StoredAmount
    period: BudgetPeriod
    is_active: bool
    created_by: UUID
    created_at: datetime


class BudgetStatus(BaseModel):
    """Utilisation of a budget over the period containing a given day."""

    budget_id: UUID
    wallet_id: UUID
    category_id: UUID
    period: BudgetPeriod
    limit: StoredAmount
    spent: StoredAmount
    remaining: StoredAmount = Field(description="limit - spent (negative when over budget)")
    percentage: float = Field(description="spent / limit * 100, not clamped")
    period_start: date
    period_end: date = Field(description="First day after the period (exclusive)")


class BudgetWithStatus(BudgetResponse):
    status: BudgetStatus


class BudgetListResult(BaseModel):
    budgets: list[BudgetWithStatus]
    money: MoneyMeta
