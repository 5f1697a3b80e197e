"""Pydantic schemas for wallets, members and balances."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from spendwise.schemas.common import MoneyMeta, StoredAmount

WalletType = Literal["personal", "shared", "savings_goal"]
RoleName = Literal["owner", "manager", "contributor", "viewer"]


# Request schemas


class WalletCreate(BaseModel):
    """Request model for creating a wallet."""

    name: str = Field(..., min_length=1, max_length=255, description="Wallet name")
    type: WalletType = Field(default="personal", description="Wallet kind")
    description: str | None = Field(None, description="Free-form description")
    currency: str | None = Field(
        None, description="ISO-4217 currency code; must match the service currency"
    )
    goal_amount: Decimal | None = Field(None, description="Savings target (savings_goal only)")
    goal_date: date | None = Field(None, description="Target date (savings_goal only)")


class WalletUpdate(BaseModel):
    """Request model for updating a wallet. Omitted fields stay unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    is_archived: bool | None = None
    goal_amount: Decimal | None = None
    goal_date: date | None = None


class RoleChangeRequest(BaseModel):
    """Request model for changing a member's role."""

    role: RoleName = Field(..., description="New role for the member")


# Response schemas


class WalletResponse(BaseModel):
    """Wallet as stored, with amounts in major units."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    type: WalletType
    currency: str
    balance: StoredAmount
    goal_amount: StoredAmount | None
    goal_date: date | None
    is_archived: bool
    created_by: UUID
    created_at: datetime
    updated_at: datetime


class WalletListItem(WalletResponse):
    """Wallet in the caller's wallet list."""

    role: RoleName = Field(description="Caller's role in this wallet")
    member_count: int
    transaction_count: int
    goal_progress: float | None = Field(
        description="Fraction of the savings goal reached, clamped to [0, 1]"
    )


class WalletListResult(BaseModel):
    """List of the caller's wallets."""

    wallets: list[WalletListItem]
    money: MoneyMeta = Field(
        description="Monetary representation for amounts in this response"
    )


class MemberResponse(BaseModel):
    """Wallet member with identity details."""

    user_id: UUID
    email: str
    display_name: str | None
    role: RoleName
    joined_at: datetime


class WalletDetail(WalletResponse):
    """Wallet with members and the caller's role."""

    role: RoleName
    members: list[MemberResponse]
    goal_progress: float | None


class BalanceResponse(BaseModel):
    """Cached balance and the result of replaying the transaction log."""

    wallet_id: UUID
    balance: StoredAmount = Field(description="Cached balance")
    replayed_balance: StoredAmount = Field(description="Signed sum of all transactions")
    in_sync: bool
    money: MoneyMeta
