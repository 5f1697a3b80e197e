"""Transaction posting and correction endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.config import settings
from spendwise.models.user import User
from spendwise.schemas.common import MoneyMeta
from spendwise.schemas.transaction import (
    PostedTransaction,
    TransactionCreate,
    TransactionResponse,
    TransactionReverseRequest,
)
from spendwise.services.ledger import LedgerService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post(
    "",
    response_model=PostedTransaction,
    status_code=status.HTTP_201_CREATED,
    summary="Post a transaction",
    description="""
    Append an income or expense entry to a wallet (contributor or above).

    - **amount** must be positive; the sign comes from **type**
    - the category's type must match **type**
    - overdrafts are allowed

    Returns the entry and the wallet's new balance.
    """,
)
async def post_transaction(
    payload: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PostedTransaction:
    transaction, wallet = await LedgerService(db).post_transaction(current_user, payload)
    return PostedTransaction(
        transaction=TransactionResponse.model_validate(transaction),
        balance=wallet.balance,
        money=MoneyMeta(currency=wallet.currency, minor_unit=settings.currency_minor_unit),
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a transaction",
)
async def get_transaction(
    transaction_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TransactionResponse:
    transaction = await LedgerService(db).get_transaction(current_user, transaction_id)
    return TransactionResponse.model_validate(transaction)


@router.post(
    "/{transaction_id}/reverse",
    response_model=PostedTransaction,
    status_code=status.HTTP_201_CREATED,
    summary="Reverse a transaction",
    description="""
    Append a correcting entry that cancels the balance effect of a
    transaction (manager or above). Entries are never edited or deleted;
    each can be reversed once and reversals cannot be reversed.
    """,
)
async def reverse_transaction(
    transaction_id: UUID,
    payload: TransactionReverseRequest | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PostedTransaction:
    reason = payload.reason if payload else None
    reversal, wallet = await LedgerService(db).reverse_transaction(current_user, transaction_id, reason)
    return PostedTransaction(
        transaction=TransactionResponse.model_validate(reversal),
        balance=wallet.balance,
        money=MoneyMeta(currency=wallet.currency, minor_unit=settings.currency_minor_unit),
    )
