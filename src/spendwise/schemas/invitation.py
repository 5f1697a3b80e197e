"""Invitation request/response schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

InviteRole = Literal["manager", "contributor", "viewer"]
InvitationStatus = Literal["pending", "accepted", "declined", "expired"]


class InvitationCreate(BaseModel):
    """Request model for inviting someone to a wallet."""

    email: EmailStr = Field(..., description="Invitee email address")
    role: InviteRole = Field(default="viewer", description="Role granted on acceptance")


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    wallet_id: UUID
    email: str
    role: InviteRole
    invited_by: UUID
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


class MembershipResponse(BaseModel):
    """Membership created by accepting an invitation."""

    model_config = ConfigDict(from_attributes=True)

    wallet_id: UUID
    user_id: UUID
    role: str
    joined_at: datetime
