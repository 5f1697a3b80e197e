"""Membership service: wallet role checks and member management.

Every wallet-scoped operation goes through ``require`` so the caller's
membership snapshot and the role table decide what is allowed.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.exceptions import (
    LastOwnerError,
    NotFoundError,
    NotMemberError,
    RoleEscalationError,
)
from spendwise.core.roles import Action, Role, authorize, outranks
from spendwise.db.unit_of_work import run_in_transaction
from spendwise.models.user import User
from spendwise.models.wallet import Wallet, WalletMember
from spendwise.repositories.wallet import MemberRepository, WalletRepository

logger = logging.getLogger(__name__)


class MembershipService:
    """Service for role checks and membership changes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.member_repo = MemberRepository(db)

    async def authorize(self, user_id: UUID, wallet_id: UUID, action: Action) -> WalletMember:
        """Check that ``user_id`` may perform ``action`` on the wallet.

        Returns:
            The caller's membership row

        Raises:
            NotMemberError: If the user has no membership in the wallet
            InsufficientRoleError: If the membership role is too low
        """
        member = await self.member_repo.get_membership(wallet_id, user_id, fresh=True)
        authorize(member.role if member else None, action)
        return member

    async def require(
        self, actor: User, wallet_id: UUID, action: Action
    ) -> tuple[Wallet, WalletMember]:
        """Load a wallet and the actor's membership, enforcing ``action``.

        The wallet row is always re-read so its version reflects the
        database, not a previous attempt.

        Raises:
            NotFoundError: If the wallet does not exist
            NotMemberError: If the actor has no membership in the wallet
            InsufficientRoleError: If the actor's role is too low
        """
        wallet = await self.wallet_repo.get_by_id(wallet_id, fresh=True)
        if wallet is None:
            raise NotFoundError(details={"wallet_id": str(wallet_id)})
        member = await self.authorize(actor.id, wallet_id, action)
        return wallet, member

    async def list_members(self, actor: User, wallet_id: UUID) -> list[tuple[WalletMember, User]]:
        """List members of a wallet with their user rows (viewer+)."""
        await self.require(actor, wallet_id, Action.VIEW)
        return await self.member_repo.list_with_users(wallet_id)

    async def change_role(
        self, actor: User, wallet_id: UUID, user_id: UUID, role: Role | str
    ) -> WalletMember:
        """Change a member's role (owner only).

        Raises:
            RoleEscalationError: If ``role`` is owner
            LastOwnerError: If the target is the wallet owner
            NotFoundError: If the target is not a member
        """
        return await run_in_transaction(self.db, self._change_role, actor, wallet_id, user_id, Role(role))

    async def _change_role(
        self, actor: User, wallet_id: UUID, user_id: UUID, role: Role
    ) -> WalletMember:
        wallet, _ = await self.require(actor, wallet_id, Action.CHANGE_ROLE)
        target = await self.member_repo.get_membership(wallet_id, user_id, fresh=True)
        if target is None:
            raise NotFoundError("API_005", details={"user_id": str(user_id)})
        if role == Role.OWNER:
            raise RoleEscalationError(details={"requested_role": role.value})
        if target.role == Role.OWNER.value:
            raise LastOwnerError(details={"wallet_id": str(wallet_id)})

        target.role = role.value
        await self.wallet_repo.compare_and_swap(wallet)

        logger.info(
            "Member role changed",
            extra={"wallet_id": str(wallet_id), "user_id": str(user_id), "role": role.value},
        )
        return target

    async def remove_member(self, actor: User, wallet_id: UUID, user_id: UUID) -> None:
        """Remove a member, or leave the wallet when ``user_id`` is the actor.

        Removing someone else needs manager+ and a role strictly above the
        target's. The owner can never be removed.

        Raises:
            NotMemberError: If the actor is not a member
            NotFoundError: If the target is not a member
            LastOwnerError: If the target is the wallet owner
            RoleEscalationError: If the target ranks at or above the actor
        """
        await run_in_transaction(self.db, self._remove_member, actor, wallet_id, user_id)

    async def _remove_member(self, actor: User, wallet_id: UUID, user_id: UUID) -> None:
        wallet = await self.wallet_repo.get_by_id(wallet_id, fresh=True)
        if wallet is None:
            raise NotFoundError(details={"wallet_id": str(wallet_id)})
        me = await self.member_repo.get_membership(wallet_id, actor.id, fresh=True)
        if me is None:
            raise NotMemberError(details={"action": Action.REMOVE_MEMBER.value})
        target = await self.member_repo.get_membership(wallet_id, user_id, fresh=True)
        if target is None:
            raise NotFoundError("API_005", details={"user_id": str(user_id)})
        if target.role == Role.OWNER.value:
            raise LastOwnerError(details={"wallet_id": str(wallet_id)})

        if user_id != actor.id:
            authorize(me.role, Action.REMOVE_MEMBER)
            if not outranks(me.role, target.role):
                raise RoleEscalationError(
                    details={"actor_role": me.role, "target_role": target.role}
                )

        await self.member_repo.delete(target)
        await self.wallet_repo.compare_and_swap(wallet)

        logger.info(
            "Member removed",
            extra={"wallet_id": str(wallet_id), "user_id": str(user_id), "left": user_id == actor.id},
        )
