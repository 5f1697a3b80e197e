"""Budget service: spending limits and their utilisation.

Spent amounts are never stored; every status read sums the expense entries
of the period straight from the transaction log.
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.dates import BUDGET_PERIODS, DEFAULT_PERIOD, period_bounds
from spendwise.core.exceptions import (
    CategoryTypeMismatchError,
    ConflictError,
    InvalidSpecError,
    NotFoundError,
)
from spendwise.core.money import to_minor_units
from spendwise.core.roles import Action
from spendwise.db.unit_of_work import run_in_transaction
from spendwise.models.budget import Budget
from spendwise.models.user import User
from spendwise.repositories.budget import BudgetRepository
from spendwise.repositories.category import CategoryRepository
from spendwise.repositories.transaction import TransactionRepository
from spendwise.repositories.wallet import WalletRepository
from spendwise.schemas.budget import BudgetCreate, BudgetStatus, BudgetUpdate
from spendwise.services.membership import MembershipService

logger = logging.getLogger(__name__)


def _validate_limit(amount) -> int:
    minor = to_minor_units(amount)
    if minor <= 0:
        raise InvalidSpecError(details={"field": "amount", "reason": "must be positive"})
    return minor


def _validate_period(period: str) -> str:
    if period not in BUDGET_PERIODS:
        raise InvalidSpecError(details={"field": "period", "value": period})
    return period


class BudgetService:
    """Service for budget CRUD and status computation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.budget_repo = BudgetRepository(db)
        self.category_repo = CategoryRepository(db)
        self.transaction_repo = TransactionRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.membership = MembershipService(db)

    async def create_budget(self, actor: User, data: BudgetCreate) -> Budget:
        """Create a budget for an expense category of a wallet (manager+).

        Raises:
            InvalidSpecError: If the limit is not positive or the period unknown
            NotFoundError: If the category does not exist
            CategoryTypeMismatchError: If the category is not an expense category
            ConflictError: If the wallet already budgets this category and period
        """

        async def _create() -> Budget:
            wallet, _ = await self.membership.require(actor, data.wallet_id, Action.MANAGE_BUDGET)
            amount = _validate_limit(data.amount)
            period = _validate_period(data.period)
            category = await self.category_repo.get_by_id(data.category_id)
            if category is None:
                raise NotFoundError("API_007", details={"category_id": str(data.category_id)})
            if category.type != "expense":
                raise CategoryTypeMismatchError(
                    details={"category_type": category.type, "expected": "expense"}
                )
            if await self.budget_repo.get_for_category(wallet.id, category.id, period):
                raise ConflictError(details={"category_id": str(category.id), "period": period})

            await self.wallet_repo.compare_and_swap(wallet)
            return await self.budget_repo.add(
                Budget(
                    wallet_id=wallet.id,
                    category_id=category.id,
                    amount=amount,
                    period=period,
                    is_active=True,
                    created_by=actor.id,
                )
            )

        budget = await run_in_transaction(self.db, _create, attached=(actor,))
        logger.info("Budget created", extra={"budget_id": str(budget.id), "wallet_id": str(budget.wallet_id)})
        return budget

    async def update_budget(self, actor: User, budget_id: UUID, data: BudgetUpdate) -> Budget:
        """Change a budget's limit, period or active flag (manager+)."""
        changes = data.model_dump(exclude_unset=True)

        async def _update() -> Budget:
            budget = await self._get(budget_id)
            wallet, _ = await self.membership.require(actor, budget.wallet_id, Action.MANAGE_BUDGET)
            values = {}
            if changes.get("amount") is not None:
                values["amount"] = _validate_limit(changes["amount"])
            if changes.get("period") is not None and changes["period"] != budget.period:
                period = _validate_period(changes["period"])
                if await self.budget_repo.get_for_category(budget.wallet_id, budget.category_id, period):
                    raise ConflictError(details={"category_id": str(budget.category_id), "period": period})
                values["period"] = period
            if changes.get("is_active") is not None:
                values["is_active"] = changes["is_active"]

            await self.wallet_repo.compare_and_swap(wallet)
            return await self.budget_repo.update(budget, values)

        budget = await run_in_transaction(self.db, _update, attached=(actor,))
        await self.db.refresh(budget)
        return budget

    async def delete_budget(self, actor: User, budget_id: UUID) -> None:
        """Delete a budget (manager+)."""

        async def _delete() -> None:
            budget = await self._get(budget_id)
            wallet, _ = await self.membership.require(actor, budget.wallet_id, Action.MANAGE_BUDGET)
            await self.wallet_repo.compare_and_swap(wallet)
            await self.budget_repo.delete(budget)

        await run_in_transaction(self.db, _delete, attached=(actor,))
        logger.info("Budget deleted", extra={"budget_id": str(budget_id)})

    async def budget_status(
        self,
        actor: User,
        wallet_id: UUID,
        category_id: UUID,
        period: str = DEFAULT_PERIOD,
        on: date | None = None,
    ) -> BudgetStatus:
        """Utilisation of the wallet's budget for a category (viewer+).

        Raises:
            NotFoundError: If no budget is configured for the category and period
        """
        await self.membership.require(actor, wallet_id, Action.VIEW)
        _validate_period(period)
        budget = await self.budget_repo.get_for_category(wallet_id, category_id, period)
        if budget is None:
            raise NotFoundError(
                "API_008", details={"wallet_id": str(wallet_id), "category_id": str(category_id)}
            )
        return await self.compute_status(budget, on)

    async def list_budgets(
        self, actor: User, wallet_id: UUID | None = None
    ) -> list[tuple[Budget, BudgetStatus]]:
        """Active budgets with current status, for one wallet or all the actor's wallets."""
        if wallet_id is not None:
            await self.membership.require(actor, wallet_id, Action.VIEW)
            wallet_ids = [wallet_id]
        else:
            wallet_ids = await self.wallet_repo.wallet_ids_for_user(actor.id)

        budgets = await self.budget_repo.get_active_by_wallets(wallet_ids)
        return [(budget, await self.compute_status(budget)) for budget in budgets]

    async def compute_status(self, budget: Budget, on: date | None = None) -> BudgetStatus:
        """Recompute spent/remaining for the period containing ``on``."""
        start, end = period_bounds(budget.period, on)
        spent = await self.transaction_repo.spent_in_range(
            budget.wallet_id, budget.category_id, start, end
        )
        return BudgetStatus(
            budget_id=budget.id,
            wallet_id=budget.wallet_id,
            category_id=budget.category_id,
            period=budget.period,
            limit=budget.amount,
            spent=spent,
            remaining=budget.amount - spent,
            percentage=round(spent / budget.amount * 100, 2),
            period_start=start,
            period_end=end,
        )

    async def _get(self, budget_id: UUID) -> Budget:
        budget = await self.budget_repo.get_by_id(budget_id, fresh=True)
        if budget is None:
            raise NotFoundError("API_008", details={"budget_id": str(budget_id)})
        return budget
