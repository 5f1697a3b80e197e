"""Invitation repository with conditional status transitions."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.models.invitation import Invitation
from spendwise.repositories.base import BaseRepository


class InvitationRepository(BaseRepository[Invitation]):
    """Repository for Invitation model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Invitation)

    async def get_pending_for_wallet_email(
        self, wallet_id: UUID, email: str
    ) -> list[Invitation]:
        """Pending invitations of one wallet addressed to ``email``."""
        result = await self.db.execute(
            select(Invitation).where(
                Invitation.wallet_id == wallet_id,
                func.lower(Invitation.email) == email.lower(),
                Invitation.status == "pending",
            )
        )
        return list(result.scalars().all())

    async def get_by_wallet(self, wallet_id: UUID) -> list[Invitation]:
        """All invitations of a wallet, newest first."""
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.wallet_id == wallet_id)
            .order_by(Invitation.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_pending_for_email(self, email: str, now: datetime) -> list[Invitation]:
        """Unexpired pending invitations addressed to ``email``."""
        result = await self.db.execute(
            select(Invitation)
            .where(
                func.lower(Invitation.email) == email.lower(),
                Invitation.status == "pending",
                Invitation.expires_at > now,
            )
            .order_by(Invitation.created_at.desc())
        )
        return list(result.scalars().all())

    async def transition(self, invitation_id: UUID, from_status: str, to_status: str) -> bool:
        """Move an invitation between statuses if it is still in ``from_status``.

        Returns:
            True if this call performed the transition
        """
        result = await self.db.execute(
            update(Invitation)
            .where(Invitation.id == invitation_id, Invitation.status == from_status)
            .values(status=to_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
