"""Invitation service: pending membership grants addressed by email.

Accepting an invitation flips its status with a conditional update and
inserts the membership in the same transaction, so it can only succeed once.
Expiry is lazy: an invitation past its TTL is marked expired when someone
tries to accept it.
"""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.config import settings
from spendwise.core.dates import as_utc, now_utc
from spendwise.core.exceptions import (
    ConflictError,
    EmailMismatchError,
    InvitationExpiredError,
    InvitationNotFoundError,
    NotFoundError,
    RoleEscalationError,
    StorageConflictError,
)
from spendwise.core.roles import Action, Role, outranks
from spendwise.db.unit_of_work import run_in_transaction
from spendwise.models.invitation import Invitation
from spendwise.models.user import User
from spendwise.models.wallet import WalletMember
from spendwise.repositories.invitation import InvitationRepository
from spendwise.repositories.wallet import MemberRepository, WalletRepository
from spendwise.services.membership import MembershipService

logger = logging.getLogger(__name__)


class InvitationService:
    """Service for inviting users to wallets and resolving invitations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.invitation_repo = InvitationRepository(db)
        self.member_repo = MemberRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.membership = MembershipService(db)

    async def invite(self, actor: User, wallet_id: UUID, email: str, role: Role | str) -> Invitation:
        """Invite ``email`` to a wallet with ``role`` (manager+).

        A still-pending invitation for the same wallet and email is replaced.

        Raises:
            RoleEscalationError: If ``role`` is owner or ranks above the actor
            ConflictError: If the email already belongs to a member
        """
        invitation = await run_in_transaction(
            self.db, self._invite, actor, wallet_id, email.strip().lower(), Role(role)
        )
        logger.info(
            "Invitation created",
            extra={"wallet_id": str(wallet_id), "invitation_id": str(invitation.id), "role": invitation.role},
        )
        return invitation

    async def _invite(self, actor: User, wallet_id: UUID, email: str, role: Role) -> Invitation:
        wallet, me = await self.membership.require(actor, wallet_id, Action.INVITE_MEMBER)
        if role == Role.OWNER or outranks(role, me.role):
            raise RoleEscalationError(details={"requested_role": role.value, "actor_role": me.role})
        if await self.member_repo.email_is_member(wallet_id, email):
            raise ConflictError(details={"wallet_id": str(wallet_id), "reason": "already a member"})

        for previous in await self.invitation_repo.get_pending_for_wallet_email(wallet_id, email):
            await self.invitation_repo.transition(previous.id, "pending", "expired")

        await self.wallet_repo.compare_and_swap(wallet)
        return await self.invitation_repo.add(
            Invitation(
                wallet_id=wallet_id,
                email=email,
                role=role.value,
                invited_by=actor.id,
                status="pending",
                expires_at=now_utc() + timedelta(days=settings.invitation_ttl_days),
            )
        )

    async def list_wallet_invitations(self, actor: User, wallet_id: UUID) -> list[Invitation]:
        """All invitations of a wallet (manager+)."""
        await self.membership.require(actor, wallet_id, Action.INVITE_MEMBER)
        return await self.invitation_repo.get_by_wallet(wallet_id)

    async def list_my_invitations(self, actor: User) -> list[Invitation]:
        """Pending, unexpired invitations addressed to the actor's email."""
        return await self.invitation_repo.get_pending_for_email(actor.email, now_utc())

    async def accept(self, invitation_id: UUID, user: User) -> WalletMember:
        """Accept an invitation and join the wallet with the invited role.

        Raises:
            InvitationNotFoundError: If missing (INV_001) or no longer pending (INV_004)
            InvitationExpiredError: If past its TTL; the invitation becomes expired
            EmailMismatchError: If addressed to another email
            ConflictError: If the user is already a member
        """
        member = await run_in_transaction(self.db, self._accept, invitation_id, user)
        if member is None:
            raise InvitationExpiredError(details={"invitation_id": str(invitation_id)})

        logger.info(
            "Invitation accepted",
            extra={"wallet_id": str(member.wallet_id), "invitation_id": str(invitation_id), "role": member.role},
        )
        return member

    async def _accept(self, invitation_id: UUID, user: User) -> WalletMember | None:
        invitation = await self._get_pending(invitation_id)

        # Returning None commits the expiry before the caller raises.
        if as_utc(invitation.expires_at) <= now_utc():
            await self.invitation_repo.transition(invitation.id, "pending", "expired")
            return None
        self._check_recipient(invitation, user)

        wallet = await self.wallet_repo.get_by_id(invitation.wallet_id, fresh=True)
        if wallet is None:
            raise NotFoundError(details={"wallet_id": str(invitation.wallet_id)})
        if await self.member_repo.get_membership(wallet.id, user.id, fresh=True):
            raise ConflictError(details={"wallet_id": str(wallet.id), "reason": "already a member"})

        if not await self.invitation_repo.transition(invitation.id, "pending", "accepted"):
            raise StorageConflictError(details={"invitation_id": str(invitation.id)})
        await self.wallet_repo.compare_and_swap(wallet)
        return await self.member_repo.add(
            WalletMember(
                wallet_id=wallet.id,
                user_id=user.id,
                role=invitation.role,
                invited_by=invitation.invited_by,
            )
        )

    async def decline(self, invitation_id: UUID, user: User) -> Invitation:
        """Decline a pending invitation addressed to the user."""

        async def _decline() -> Invitation:
            invitation = await self._get_pending(invitation_id)
            self._check_recipient(invitation, user)
            if not await self.invitation_repo.transition(invitation.id, "pending", "declined"):
                raise StorageConflictError(details={"invitation_id": str(invitation.id)})
            return invitation

        invitation = await run_in_transaction(self.db, _decline, attached=(user,))
        await self.db.refresh(invitation)
        logger.info("Invitation declined", extra={"invitation_id": str(invitation_id)})
        return invitation

    async def _get_pending(self, invitation_id: UUID) -> Invitation:
        invitation = await self.invitation_repo.get_by_id(invitation_id, fresh=True)
        if invitation is None:
            raise InvitationNotFoundError(details={"invitation_id": str(invitation_id)})
        if invitation.status != "pending":
            raise InvitationNotFoundError(
                "INV_004", http_status=409, details={"status": invitation.status}
            )
        return invitation

    @staticmethod
    def _check_recipient(invitation: Invitation, user: User) -> None:
        if invitation.email.lower() != user.email.lower():
            raise EmailMismatchError(details={"invitation_id": str(invitation.id)})
