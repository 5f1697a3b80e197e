"""Report response schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from spendwise.schemas.common import MoneyMeta, StoredAmount


class FinancialSummary(BaseModel):
    """Income and expenses across the caller's wallets for a date range."""

    total_income: StoredAmount
    total_expenses: StoredAmount
    net_cash_flow: StoredAmount
    transaction_count: int
    wallet_count: int
    period_start: date
    period_end: date = Field(description="First day after the range (exclusive)")
    money: MoneyMeta


class WalletSummary(BaseModel):
    """Income and expenses of one wallet for a date range."""

    wallet_id: UUID
    total_income: StoredAmount
    total_expenses: StoredAmount
    net_cash_flow: StoredAmount
    transaction_count: int
    period_start: date
    period_end: date
    money: MoneyMeta


class CategorySpending(BaseModel):
    category_id: UUID
    name: str
    icon: str | None
    color: str | None
    amount: StoredAmount
    transaction_count: int


class CategorySpendingResult(BaseModel):
    wallet_id: UUID
    period_start: date
    period_end: date
    categories: list[CategorySpending]
    money: MoneyMeta
