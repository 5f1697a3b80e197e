"""Ledger service: the transaction log and the cached wallet balance.

The balance is a projection of the log. Every posting appends one row and
moves the balance by that row's signed amount in the same database
transaction, guarded by the wallet's version counter.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.config import settings
from spendwise.core.dates import utc_today
from spendwise.core.exceptions import (
    CategoryTypeMismatchError,
    InvalidSpecError,
    NotFoundError,
    TransactionAlreadyReversedError,
)
from spendwise.core.money import from_minor_units, to_minor_units
from spendwise.core.roles import Action
from spendwise.db.unit_of_work import run_in_transaction
from spendwise.models.transaction import Transaction
from spendwise.models.user import User
from spendwise.models.wallet import Wallet
from spendwise.repositories.category import CategoryRepository
from spendwise.repositories.transaction import TransactionRepository
from spendwise.repositories.wallet import WalletRepository
from spendwise.schemas.common import MoneyMeta
from spendwise.schemas.transaction import TransactionCreate
from spendwise.schemas.wallet import BalanceResponse
from spendwise.services.membership import MembershipService

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ("income", "expense")


class LedgerService:
    """Service for posting, reversing and reading ledger entries."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.category_repo = CategoryRepository(db)
        self.membership = MembershipService(db)

    async def post_transaction(self, actor: User, data: TransactionCreate) -> tuple[Transaction, Wallet]:
        """Append an income or expense entry and move the wallet balance.

        Overdrafts are allowed. A rejected posting leaves both the log and
        the balance untouched.

        Returns:
            The new transaction and the wallet with its updated balance

        Raises:
            NotMemberError / InsufficientRoleError: If the actor may not post
            InvalidSpecError: If the amount is not positive or the wallet is archived
            NotFoundError: If the wallet or category does not exist
            CategoryTypeMismatchError: If the category type differs from the entry type
        """
        transaction = await run_in_transaction(self.db, self._post, actor, data)
        wallet = await self.wallet_repo.get_by_id(transaction.wallet_id, fresh=True)

        logger.info(
            "Transaction posted",
            extra={
                "wallet_id": str(transaction.wallet_id),
                "transaction_id": str(transaction.id),
                "type": transaction.type,
            },
        )
        return transaction, wallet

    async def _post(self, actor: User, data: TransactionCreate) -> Transaction:
        wallet, _ = await self.membership.require(actor, data.wallet_id, Action.CREATE_TRANSACTION)

        if data.type not in TRANSACTION_TYPES:
            raise InvalidSpecError(details={"field": "type", "value": data.type})
        amount = to_minor_units(data.amount)
        if amount <= 0:
            raise InvalidSpecError(details={"field": "amount", "reason": "must be positive"})
        if wallet.is_archived:
            raise InvalidSpecError(details={"wallet_id": str(wallet.id), "reason": "wallet is archived"})

        category = await self.category_repo.get_by_id(data.category_id)
        if category is None:
            raise NotFoundError("API_007", details={"category_id": str(data.category_id)})
        if category.type != data.type:
            raise CategoryTypeMismatchError(
                details={"category_type": category.type, "transaction_type": data.type}
            )

        transaction = Transaction(
            wallet_id=wallet.id,
            category_id=category.id,
            created_by=actor.id,
            type=data.type,
            amount=amount,
            description=data.description,
            txn_date=data.txn_date or utc_today(),
        )
        await self.wallet_repo.compare_and_swap(wallet, balance_delta=transaction.signed_amount)
        return await self.transaction_repo.add(transaction)

    async def reverse_transaction(
        self, actor: User, transaction_id: UUID, reason: str | None = None
    ) -> tuple[Transaction, Wallet]:
        """Append an entry cancelling the balance effect of another (manager+).

        The reversal carries the original's type, category, amount and date so
        budget and report totals for that period are corrected too.

        Raises:
            NotFoundError: If the transaction does not exist
            TransactionAlreadyReversedError: If it is a reversal or already reversed
        """
        reversal = await run_in_transaction(self.db, self._reverse, actor, transaction_id, reason)
        wallet = await self.wallet_repo.get_by_id(reversal.wallet_id, fresh=True)

        logger.info(
            "Transaction reversed",
            extra={
                "wallet_id": str(reversal.wallet_id),
                "transaction_id": str(transaction_id),
                "reversal_id": str(reversal.id),
            },
        )
        return reversal, wallet

    async def _reverse(self, actor: User, transaction_id: UUID, reason: str | None) -> Transaction:
        original = await self.transaction_repo.get_by_id(transaction_id)
        if original is None:
            raise NotFoundError("API_006", details={"transaction_id": str(transaction_id)})
        wallet, _ = await self.membership.require(actor, original.wallet_id, Action.REVERSE_TRANSACTION)

        if original.is_reversal:
            raise TransactionAlreadyReversedError(
                details={"transaction_id": str(transaction_id), "reason": "entry is a reversal"}
            )
        if await self.transaction_repo.get_reversal_of(original.id) is not None:
            raise TransactionAlreadyReversedError(details={"transaction_id": str(transaction_id)})
        if wallet.is_archived:
            raise InvalidSpecError(details={"wallet_id": str(wallet.id), "reason": "wallet is archived"})

        reversal = Transaction(
            wallet_id=original.wallet_id,
            category_id=original.category_id,
            created_by=actor.id,
            type=original.type,
            amount=original.amount,
            description=reason or f"Reversal of {original.id}",
            txn_date=original.txn_date,
            reversal_of_id=original.id,
        )
        await self.wallet_repo.compare_and_swap(wallet, balance_delta=reversal.signed_amount)
        return await self.transaction_repo.add(reversal)

    async def get_transaction(self, actor: User, transaction_id: UUID) -> Transaction:
        """Get one entry of a wallet the actor can view."""
        transaction = await self.transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError("API_006", details={"transaction_id": str(transaction_id)})
        await self.membership.require(actor, transaction.wallet_id, Action.VIEW)
        return transaction

    async def list_transactions(
        self,
        actor: User,
        wallet_id: UUID,
        limit: int = 50,
        offset: int = 0,
        days: int | None = None,
    ) -> list[Transaction]:
        """List a wallet's entries, newest first, optionally only the last ``days`` days."""
        await self.membership.require(actor, wallet_id, Action.VIEW)
        since = utc_today() - timedelta(days=days) if days is not None else None
        return await self.transaction_repo.get_by_wallet(wallet_id, skip=offset, limit=limit, since=since)

    async def get_balance(self, actor: User, wallet_id: UUID) -> Decimal:
        """Cached balance of a wallet in major units."""
        wallet, _ = await self.membership.require(actor, wallet_id, Action.VIEW)
        return from_minor_units(wallet.balance)

    async def verify_balance(self, actor: User, wallet_id: UUID) -> BalanceResponse:
        """Compare the cached balance with a replay of the transaction log."""
        wallet, _ = await self.membership.require(actor, wallet_id, Action.VIEW)
        replayed = await self.transaction_repo.signed_sum(wallet_id)
        if replayed != wallet.balance:
            logger.warning(
                "Balance drift detected",
                extra={"wallet_id": str(wallet_id), "cached": wallet.balance, "replayed": replayed},
            )
        return BalanceResponse(
            wallet_id=wallet.id,
            balance=wallet.balance,
            replayed_balance=replayed,
            in_sync=replayed == wallet.balance,
            money=MoneyMeta(currency=wallet.currency, minor_unit=settings.currency_minor_unit),
        )

    async def repair_balance(self, actor: User, wallet_id: UUID) -> BalanceResponse:
        """Reset the cached balance to the replayed log sum (owner only)."""

        async def _repair() -> int:
            wallet, _ = await self.membership.require(actor, wallet_id, Action.REPAIR_BALANCE)
            replayed = await self.transaction_repo.signed_sum(wallet_id)
            drift = replayed - wallet.balance
            await self.wallet_repo.compare_and_swap(wallet, balance_delta=drift)
            return drift

        drift = await run_in_transaction(self.db, _repair, attached=(actor,))
        if drift:
            logger.warning("Balance repaired", extra={"wallet_id": str(wallet_id), "drift": drift})
        return await self.verify_balance(actor, wallet_id)
