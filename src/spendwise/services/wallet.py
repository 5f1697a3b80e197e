"""Wallet service: wallet lifecycle and savings-goal progress."""

import logging
import re
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.config import settings
from spendwise.core.dates import utc_today
from spendwise.core.exceptions import InvalidSpecError
from spendwise.core.money import to_minor_units
from spendwise.core.roles import Action, Role
from spendwise.db.unit_of_work import run_in_transaction
from spendwise.models.user import User
from spendwise.models.wallet import Wallet, WalletMember
from spendwise.repositories.wallet import MemberRepository, WalletRepository
from spendwise.schemas.common import MoneyMeta
from spendwise.schemas.wallet import (
    MemberResponse,
    WalletCreate,
    WalletDetail,
    WalletListItem,
    WalletListResult,
    WalletResponse,
    WalletUpdate,
)
from spendwise.services.membership import MembershipService

logger = logging.getLogger(__name__)

WALLET_TYPES = ("personal", "shared", "savings_goal")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def goal_progress(wallet: Wallet) -> float | None:
    """Fraction of a wallet's savings goal reached, clamped to [0, 1].

    Returns None when the wallet has no positive goal amount.
    """
    if not wallet.goal_amount or wallet.goal_amount <= 0:
        return None
    return max(0.0, min(wallet.balance / wallet.goal_amount, 1.0))


def _validate_goal(wallet_type: str, goal_amount: int | None, goal_date) -> None:
    if wallet_type != "savings_goal":
        if goal_amount is not None or goal_date is not None:
            raise InvalidSpecError(
                details={"field": "goal", "reason": "only savings_goal wallets carry a goal"}
            )
        return
    if goal_amount is not None and goal_amount <= 0:
        raise InvalidSpecError(details={"field": "goal_amount", "reason": "must be positive"})
    if goal_date is not None and goal_date < utc_today():
        raise InvalidSpecError(details={"field": "goal_date", "reason": "must not be in the past"})


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidSpecError(details={"field": "name", "reason": "must not be blank"})
    return cleaned


class WalletService:
    """Service for creating, reading, updating and deleting wallets."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.member_repo = MemberRepository(db)
        self.membership = MembershipService(db)

    async def create_wallet(self, actor: User, data: WalletCreate) -> Wallet:
        """Create a wallet with a zero balance and the actor as sole owner.

        Raises:
            InvalidSpecError: If the name, type, currency or goal is invalid
        """
        name = _clean_name(data.name)
        if data.type not in WALLET_TYPES:
            raise InvalidSpecError(details={"field": "type", "value": data.type})
        currency = data.currency or settings.currency
        if not CURRENCY_PATTERN.match(currency):
            raise InvalidSpecError(details={"field": "currency", "value": currency})
        if currency != settings.currency:
            # Amounts, budgets and reports share one minor unit.
            raise InvalidSpecError(
                details={"field": "currency", "value": currency, "supported": settings.currency}
            )
        goal_amount = to_minor_units(data.goal_amount) if data.goal_amount is not None else None
        _validate_goal(data.type, goal_amount, data.goal_date)

        async def _create() -> Wallet:
            wallet = await self.wallet_repo.add(
                Wallet(
                    name=name,
                    description=data.description,
                    type=data.type,
                    currency=currency,
                    balance=0,
                    goal_amount=goal_amount,
                    goal_date=data.goal_date,
                    is_archived=False,
                    created_by=actor.id,
                    version=0,
                )
            )
            await self.member_repo.add(
                WalletMember(wallet_id=wallet.id, user_id=actor.id, role=Role.OWNER.value)
            )
            return wallet

        wallet = await run_in_transaction(self.db, _create, attached=(actor,))
        logger.info("Wallet created", extra={"wallet_id": str(wallet.id), "wallet_type": wallet.type})
        return wallet

    async def list_wallets(self, actor: User, include_archived: bool = False) -> WalletListResult:
        """List the actor's wallets with role, counts and goal progress."""
        rows = await self.wallet_repo.list_for_user(actor.id, include_archived=include_archived)
        items = [
            WalletListItem(
                **WalletResponse.model_validate(wallet).model_dump(),
                role=role,
                member_count=member_count,
                transaction_count=transaction_count,
                goal_progress=goal_progress(wallet),
            )
            for wallet, role, member_count, transaction_count in rows
        ]
        return WalletListResult(
            wallets=items,
            money=MoneyMeta(currency=settings.currency, minor_unit=settings.currency_minor_unit),
        )

    async def get_wallet(self, actor: User, wallet_id: UUID) -> WalletDetail:
        """Get a wallet with its members (viewer+)."""
        wallet, member = await self.membership.require(actor, wallet_id, Action.VIEW)
        members = await self.member_repo.list_with_users(wallet_id)
        return WalletDetail(
            **WalletResponse.model_validate(wallet).model_dump(),
            role=member.role,
            members=[
                MemberResponse(
                    user_id=user.id,
                    email=user.email,
                    display_name=user.display_name,
                    role=m.role,
                    joined_at=m.joined_at,
                )
                for m, user in members
            ],
            goal_progress=goal_progress(wallet),
        )

    async def update_wallet(self, actor: User, wallet_id: UUID, data: WalletUpdate) -> Wallet:
        """Update name, description, archive flag or goal (manager+).

        Type, currency and balance cannot be changed here.
        """
        changes = data.model_dump(exclude_unset=True)

        async def _update() -> Wallet:
            wallet, _ = await self.membership.require(actor, wallet_id, Action.UPDATE_WALLET)
            values = {}
            if "name" in changes:
                values["name"] = _clean_name(changes["name"] or "")
            if "description" in changes:
                values["description"] = changes["description"]
            if changes.get("is_archived") is not None:
                values["is_archived"] = changes["is_archived"]
            if "goal_amount" in changes or "goal_date" in changes:
                goal_amount = wallet.goal_amount
                goal_date = wallet.goal_date
                if "goal_amount" in changes:
                    raw = changes["goal_amount"]
                    goal_amount = to_minor_units(raw) if raw is not None else None
                    values["goal_amount"] = goal_amount
                if "goal_date" in changes:
                    goal_date = changes["goal_date"]
                    values["goal_date"] = goal_date
                _validate_goal(wallet.type, goal_amount, goal_date)
            await self.wallet_repo.compare_and_swap(wallet, **values)
            return wallet

        wallet = await run_in_transaction(self.db, _update, attached=(actor,))
        await self.db.refresh(wallet)
        logger.info("Wallet updated", extra={"wallet_id": str(wallet_id), "fields": sorted(changes)})
        return wallet

    async def delete_wallet(self, actor: User, wallet_id: UUID) -> None:
        """Delete a wallet and everything scoped to it (owner only)."""

        async def _delete() -> None:
            await self.membership.require(actor, wallet_id, Action.DELETE_WALLET)
            await self.wallet_repo.delete_with_children(wallet_id)

        await run_in_transaction(self.db, _delete, attached=(actor,))
        logger.info("Wallet deleted", extra={"wallet_id": str(wallet_id)})

    async def progress(self, actor: User, wallet_id: UUID) -> float | None:
        """Savings-goal progress of a wallet (viewer+)."""
        wallet, _ = await self.membership.require(actor, wallet_id, Action.VIEW)
        return goal_progress(wallet)
