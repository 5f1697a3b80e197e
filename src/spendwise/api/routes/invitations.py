"""Wallet invitation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.models.user import User
from spendwise.schemas.invitation import (
    InvitationCreate,
    InvitationResponse,
    MembershipResponse,
)
from spendwise.services.invitation import InvitationService

router = APIRouter(tags=["invitations"])


@router.post(
    "/wallets/{wallet_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite someone to a wallet",
    description="""
    Invite an email address with a role (manager or owner).

    - the role may not rank above the inviter's and may not be owner
    - a pending invitation for the same email is replaced
    - invitations expire after the configured TTL (7 days by default)
    """,
)
async def create_invitation(
    wallet_id: UUID,
    payload: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InvitationResponse:
    invitation = await InvitationService(db).invite(current_user, wallet_id, payload.email, payload.role)
    return InvitationResponse.model_validate(invitation)


@router.get(
    "/wallets/{wallet_id}/invitations",
    response_model=list[InvitationResponse],
    summary="List a wallet's invitations",
)
async def list_wallet_invitations(
    wallet_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[InvitationResponse]:
    invitations = await InvitationService(db).list_wallet_invitations(current_user, wallet_id)
    return [InvitationResponse.model_validate(inv) for inv in invitations]


@router.get(
    "/invitations",
    response_model=list[InvitationResponse],
    summary="List my pending invitations",
)
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[InvitationResponse]:
    invitations = await InvitationService(db).list_my_invitations(current_user)
    return [InvitationResponse.model_validate(inv) for inv in invitations]


@router.post(
    "/invitations/{invitation_id}/accept",
    response_model=MembershipResponse,
    summary="Accept an invitation",
)
async def accept_invitation(
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MembershipResponse:
    member = await InvitationService(db).accept(invitation_id, current_user)
    return MembershipResponse.model_validate(member)


@router.post(
    "/invitations/{invitation_id}/decline",
    response_model=InvitationResponse,
    summary="Decline an invitation",
)
async def decline_invitation(
    invitation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> InvitationResponse:
    invitation = await InvitationService(db).decline(invitation_id, current_user)
    return InvitationResponse.model_validate(invitation)
