"""Transaction request/response schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from spendwise.schemas.common import MoneyMeta, PaginationMeta, StoredAmount

TransactionType = Literal["income", "expense"]


class TransactionCreate(BaseModel):
    """Request model for posting a transaction to a wallet."""

    wallet_id: UUID
    category_id: UUID
    type: TransactionType
    amount: Decimal = Field(description="Positive amount in major units (e.g. 42.50)")
    description: str | None = Field(None, max_length=1000)
    txn_date: date | None = Field(None, description="Transaction date (defaults to today, UTC)")


class TransactionReverseRequest(BaseModel):
    """Request model for reversing a transaction."""

    reason: str | None = Field(None, max_length=1000, description="Why the entry is corrected")


class TransactionResponse(BaseModel):
    """Ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    wallet_id: UUID
    category_id: UUID
    created_by: UUID
    type: TransactionType
    amount: StoredAmount
    description: str | None
    txn_date: date
    reversal_of_id: UUID | None
    created_at: datetime


class PostedTransaction(BaseModel):
    """A newly appended entry together with the wallet's new balance."""

    transaction: TransactionResponse
    balance: StoredAmount
    money: MoneyMeta


class TransactionListResult(BaseModel):
    """Page of a wallet's transactions, newest first."""

    transactions: list[TransactionResponse]
    pagination: PaginationMeta
    money: MoneyMeta = Field(
        description="Monetary representation for amounts in this response"
    )
