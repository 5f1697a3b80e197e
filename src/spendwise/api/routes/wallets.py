"""Wallet management, balance and member endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.config import settings
from spendwise.models.user import User
from spendwise.schemas.common import MoneyMeta, PaginationMeta
from spendwise.schemas.transaction import TransactionListResult, TransactionResponse
from spendwise.schemas.wallet import (
    BalanceResponse,
    MemberResponse,
    RoleChangeRequest,
    WalletCreate,
    WalletDetail,
    WalletListResult,
    WalletResponse,
    WalletUpdate,
)
from spendwise.services.ledger import LedgerService
from spendwise.services.membership import MembershipService
from spendwise.services.wallet import WalletService

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get(
    "",
    response_model=WalletListResult,
    summary="List the caller's wallets",
    description="""
    Wallets the caller is a member of, newest first, each with:
    - the caller's role
    - member and transaction counts
    - savings-goal progress (savings_goal wallets)
    """,
)
async def list_wallets(
    include_archived: bool = Query(False, description="Include archived wallets"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> WalletListResult:
    return await WalletService(db).list_wallets(current_user, include_archived=include_archived)


@router.post(
    "",
    response_model=WalletResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a wallet",
    description="Create a wallet with a zero balance; the caller becomes its owner.",
)
async def create_wallet(
    payload: WalletCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> WalletResponse:
    wallet = await WalletService(db).create_wallet(current_user, payload)
    return WalletResponse.model_validate(wallet)


@router.get(
    "/{wallet_id}",
    response_model=WalletDetail,
    summary="Get wallet details",
)
async def get_wallet(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> WalletDetail:
    return await WalletService(db).get_wallet(current_user, wallet_id)


@router.patch(
    "/{wallet_id}",
    response_model=WalletResponse,
    summary="Update a wallet",
    description="Rename, describe, archive or change the savings goal (manager or owner).",
)
async def update_wallet(
    wallet_id: UUID,
    payload: WalletUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> WalletResponse:
    wallet = await WalletService(db).update_wallet(current_user, wallet_id, payload)
    return WalletResponse.model_validate(wallet)


@router.delete(
    "/{wallet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a wallet",
    description="Delete the wallet with its transactions, budgets, members and invitations (owner only).",
)
async def delete_wallet(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await WalletService(db).delete_wallet(current_user, wallet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{wallet_id}/balance",
    response_model=BalanceResponse,
    summary="Get wallet balance",
    description="Cached balance alongside a replay of the transaction log.",
)
async def get_balance(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BalanceResponse:
    return await LedgerService(db).verify_balance(current_user, wallet_id)


@router.post(
    "/{wallet_id}/balance/repair",
    response_model=BalanceResponse,
    summary="Repair wallet balance",
    description="Reset the cached balance to the replayed transaction log (owner only).",
)
async def repair_balance(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BalanceResponse:
    return await LedgerService(db).repair_balance(current_user, wallet_id)


@router.get(
    "/{wallet_id}/transactions",
    response_model=TransactionListResult,
    summary="List wallet transactions",
    description="Entries of the wallet, newest first.",
)
async def list_wallet_transactions(
    wallet_id: UUID,
    limit: Annotated[int, Query(ge=1, le=200, description="Items per page (1-200)")] = 50,
    offset: Annotated[int, Query(ge=0, description="Items to skip")] = 0,
    days: Annotated[
        int | None, Query(ge=0, description="Only entries from the last N days")
    ] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TransactionListResult:
    transactions = await LedgerService(db).list_transactions(
        current_user, wallet_id, limit=limit, offset=offset, days=days
    )
    return TransactionListResult(
        transactions=[TransactionResponse.model_validate(txn) for txn in transactions],
        pagination=PaginationMeta(limit=limit, offset=offset, count=len(transactions)),
        money=MoneyMeta(currency=settings.currency, minor_unit=settings.currency_minor_unit),
    )


@router.get(
    "/{wallet_id}/members",
    response_model=list[MemberResponse],
    summary="List wallet members",
)
async def list_members(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[MemberResponse]:
    rows = await MembershipService(db).list_members(current_user, wallet_id)
    return [
        MemberResponse(
            user_id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=member.role,
            joined_at=member.joined_at,
        )
        for member, user in rows
    ]


@router.put(
    "/{wallet_id}/members/{user_id}/role",
    response_model=MemberResponse,
    summary="Change a member's role",
    description="Owner only. The owner role itself cannot be granted or taken away.",
)
async def change_member_role(
    wallet_id: UUID,
    user_id: UUID,
    payload: RoleChangeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MemberResponse:
    service = MembershipService(db)
    await service.change_role(current_user, wallet_id, user_id, payload.role)
    rows = await service.list_members(current_user, wallet_id)
    member, user = next((m, u) for m, u in rows if u.id == user_id)
    return MemberResponse(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
        role=member.role,
        joined_at=member.joined_at,
    )


@router.delete(
    "/{wallet_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
    description="Remove a lower-ranked member (manager or owner), or leave the wallet yourself.",
)
async def remove_member(
    wallet_id: UUID,
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await MembershipService(db).remove_member(current_user, wallet_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
