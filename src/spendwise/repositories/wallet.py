"""Wallet and membership repositories."""
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.exceptions import InvalidSpecError, StorageConflictError
from spendwise.core.money import MAX_MINOR_UNITS
from spendwise.models.budget import Budget
from spendwise.models.invitation import Invitation
from spendwise.models.transaction import Transaction
from spendwise.models.user import User
from spendwise.models.wallet import Wallet, WalletMember
from spendwise.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Repository for Wallet model with versioned writes."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Wallet)

    async def compare_and_swap(
        self, wallet: Wallet, balance_delta: int = 0, **values
    ) -> None:
        """Apply a versioned write to a wallet row.

        The update only lands if the row still carries the version that was
        read into ``wallet``; otherwise another writer got there first.

        Raises:
            InvalidSpecError: If the new balance would not fit the balance column
            StorageConflictError: If the version moved since it was read
        """
        if abs(wallet.balance + balance_delta) > MAX_MINOR_UNITS:
            raise InvalidSpecError(
                details={"wallet_id": str(wallet.id), "reason": "balance out of range"}
            )
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet.id, Wallet.version == wallet.version)
            .values(
                balance=Wallet.balance + balance_delta,
                version=Wallet.version + 1,
                **values,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise StorageConflictError(
                details={"wallet_id": str(wallet.id), "seen_version": wallet.version}
            )

    async def list_for_user(
        self, user_id: UUID, include_archived: bool = False
    ) -> list[tuple[Wallet, str, int, int]]:
        """List wallets the user belongs to.

        Returns:
            Tuples of (wallet, caller role, member count, transaction count),
            newest wallet first.
        """
        member_count = (
            select(func.count(WalletMember.id))
            .where(WalletMember.wallet_id == Wallet.id)
            .correlate(Wallet)
            .scalar_subquery()
        )
        txn_count = (
            select(func.count(Transaction.id))
            .where(Transaction.wallet_id == Wallet.id)
            .correlate(Wallet)
            .scalar_subquery()
        )
        stmt = (
            select(Wallet, WalletMember.role, member_count, txn_count)
            .join(WalletMember, WalletMember.wallet_id == Wallet.id)
            .where(WalletMember.user_id == user_id)
            .order_by(Wallet.created_at.desc())
        )
        if not include_archived:
            stmt = stmt.where(Wallet.is_archived == False)  # noqa: E712
        result = await self.db.execute(stmt)
        return [(row[0], row[1], int(row[2]), int(row[3])) for row in result.all()]

    async def wallet_ids_for_user(self, user_id: UUID) -> list[UUID]:
        """IDs of every wallet the user is a member of."""
        result = await self.db.execute(
            select(WalletMember.wallet_id).where(WalletMember.user_id == user_id)
        )
        return list(result.scalars().all())

    async def delete_with_children(self, wallet_id: UUID) -> None:
        """Delete a wallet together with everything scoped to it."""
        # Reversals reference their originals, so drop them first.
        await self.db.execute(
            delete(Transaction).where(
                Transaction.wallet_id == wallet_id, Transaction.reversal_of_id.is_not(None)
            )
        )
        for model in (Transaction, Budget, Invitation, WalletMember):
            await self.db.execute(delete(model).where(model.wallet_id == wallet_id))
        await self.db.execute(delete(Wallet).where(Wallet.id == wallet_id))


class MemberRepository(BaseRepository[WalletMember]):
    """Repository for WalletMember rows."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, WalletMember)

    async def get_membership(
        self, wallet_id: UUID, user_id: UUID, fresh: bool = False
    ) -> WalletMember | None:
        """Membership snapshot of a user in a wallet, if any."""
        stmt = select(WalletMember).where(
            WalletMember.wallet_id == wallet_id, WalletMember.user_id == user_id
        )
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_users(self, wallet_id: UUID) -> list[tuple[WalletMember, User]]:
        """Members of a wallet with their user rows, earliest joiner first."""
        result = await self.db.execute(
            select(WalletMember, User)
            .join(User, User.id == WalletMember.user_id)
            .where(WalletMember.wallet_id == wallet_id)
            .order_by(WalletMember.joined_at)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def email_is_member(self, wallet_id: UUID, email: str) -> bool:
        """Check whether a user with ``email`` already belongs to the wallet."""
        result = await self.db.execute(
            select(WalletMember.id)
            .join(User, User.id == WalletMember.user_id)
            .where(WalletMember.wallet_id == wallet_id, func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none() is not None
