"""Integration tests for posting, reversing and replaying ledger entries."""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.dates import utc_today
from spendwise.core.exceptions import (
    CategoryTypeMismatchError,
    InsufficientRoleError,
    InvalidSpecError,
    NotFoundError,
    NotMemberError,
    StorageConflictError,
    TransactionAlreadyReversedError,
)
from spendwise.models.transaction import Transaction
from spendwise.models.user import User
from spendwise.models.wallet import Wallet, WalletMember
from spendwise.repositories.wallet import WalletRepository
from spendwise.schemas.transaction import TransactionCreate
from spendwise.schemas.wallet import WalletCreate
from spendwise.services.ledger import LedgerService
from spendwise.services.wallet import WalletService


async def _create_wallet(db: AsyncSession, owner: User, **kwargs) -> Wallet:
    data = WalletCreate(name=kwargs.pop("name", "Everyday"), **kwargs)
    return await WalletService(db).create_wallet(owner, data)


async def _post(db: AsyncSession, actor: User, wallet: Wallet, category, amount: str, **kwargs):
    data = TransactionCreate(
        wallet_id=wallet.id,
        category_id=category.id,
        type=kwargs.pop("type", category.type),
        amount=Decimal(amount),
        **kwargs,
    )
    return await LedgerService(db).post_transaction(actor, data)


async def _add_member(db: AsyncSession, wallet: Wallet, user: User, role: str) -> None:
    db.add(WalletMember(wallet_id=wallet.id, user_id=user.id, role=role))
    await db.commit()


class TestPostTransaction:
    """Posting entries moves the balance by their signed amount."""

    @pytest.mark.asyncio
    async def test_expense_then_income_scenario(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user, type="personal")
        assert wallet.balance == 0

        _, wallet = await _post(db_session, test_user, wallet, categories["Food & Dining"], "42.50")
        assert wallet.balance == -4250

        _, wallet = await _post(db_session, test_user, wallet, categories["Salary"], "100.00")
        assert wallet.balance == 5750
        assert await LedgerService(db_session).get_balance(test_user, wallet.id) == Decimal("57.50")

    @pytest.mark.asyncio
    async def test_overdraft_allowed(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)

        _, wallet = await _post(db_session, test_user, wallet, categories["Travel"], "999.99")

        assert wallet.balance == -99999

    @pytest.mark.asyncio
    async def test_defaults_date_to_today(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)

        transaction, _ = await _post(db_session, test_user, wallet, categories["Salary"], "1")

        assert transaction.txn_date is not None
        assert transaction.created_by == test_user.id

    @pytest.mark.asyncio
    async def test_category_type_mismatch_rejected(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)

        with pytest.raises(CategoryTypeMismatchError):
            await _post(db_session, test_user, wallet, categories["Salary"], "10", type="expense")

        await db_session.refresh(wallet)
        assert wallet.balance == 0
        assert await LedgerService(db_session).list_transactions(test_user, wallet.id) == []

    @pytest.mark.parametrize("amount", ["0", "-5", "1.001"])
    @pytest.mark.asyncio
    async def test_invalid_amount_rejected(self, db_session, test_user, categories, amount):
        wallet = await _create_wallet(db_session, test_user)

        with pytest.raises(InvalidSpecError):
            await _post(db_session, test_user, wallet, categories["Salary"], amount)

        await db_session.refresh(wallet)
        assert wallet.balance == 0

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        data = TransactionCreate(
            wallet_id=wallet.id,
            category_id=wallet.id,
            type="income",
            amount=Decimal("1"),
        )

        with pytest.raises(NotFoundError) as exc_info:
            await LedgerService(db_session).post_transaction(test_user, data)
        assert exc_info.value.error_code == "API_007"

    @pytest.mark.asyncio
    async def test_archived_wallet_rejects_postings(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        db_session.add(wallet)
        wallet.is_archived = True
        await db_session.commit()

        with pytest.raises(InvalidSpecError):
            await _post(db_session, test_user, wallet, categories["Salary"], "1")

    @pytest.mark.asyncio
    async def test_viewer_cannot_post(self, db_session, test_user, other_user, categories):
        wallet = await _create_wallet(db_session, test_user, type="shared")
        await _add_member(db_session, wallet, other_user, "viewer")

        with pytest.raises(InsufficientRoleError):
            await _post(db_session, other_user, wallet, categories["Salary"], "1")

    @pytest.mark.asyncio
    async def test_non_member_cannot_post(self, db_session, test_user, other_user, categories):
        wallet = await _create_wallet(db_session, test_user)

        with pytest.raises(NotMemberError):
            await _post(db_session, other_user, wallet, categories["Salary"], "1")

    @pytest.mark.asyncio
    async def test_contributor_can_post(self, db_session, test_user, other_user, categories):
        wallet = await _create_wallet(db_session, test_user, type="shared")
        await _add_member(db_session, wallet, other_user, "contributor")

        transaction, wallet = await _post(db_session, other_user, wallet, categories["Shopping"], "3")

        assert transaction.created_by == other_user.id
        assert wallet.balance == -300

    @pytest.mark.asyncio
    async def test_balance_overflow_rejected(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        wallet_id = wallet.id
        _, wallet = await _post(db_session, test_user, wallet, categories["Salary"], "90000000000000000")

        with pytest.raises(InvalidSpecError):
            await _post(db_session, test_user, wallet, categories["Salary"], "90000000000000000")

        assert await LedgerService(db_session).get_balance(test_user, wallet_id) == Decimal(
            "90000000000000000.00"
        )


class TestReverseTransaction:
    @pytest.mark.asyncio
    async def test_reversal_restores_balance(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        original, _ = await _post(db_session, test_user, wallet, categories["Food & Dining"], "20")

        reversal, wallet = await LedgerService(db_session).reverse_transaction(
            test_user, original.id, "duplicate entry"
        )

        assert wallet.balance == 0
        assert reversal.reversal_of_id == original.id
        assert reversal.amount == original.amount
        assert reversal.txn_date == original.txn_date
        assert reversal.description == "duplicate entry"

    @pytest.mark.asyncio
    async def test_cannot_reverse_twice(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        original, _ = await _post(db_session, test_user, wallet, categories["Salary"], "20")
        service = LedgerService(db_session)
        reversal, _ = await service.reverse_transaction(test_user, original.id)

        with pytest.raises(TransactionAlreadyReversedError):
            await service.reverse_transaction(test_user, original.id)
        with pytest.raises(TransactionAlreadyReversedError):
            await service.reverse_transaction(test_user, reversal.id)

    @pytest.mark.asyncio
    async def test_contributor_cannot_reverse(self, db_session, test_user, other_user, categories):
        wallet = await _create_wallet(db_session, test_user, type="shared")
        await _add_member(db_session, wallet, other_user, "contributor")
        original, _ = await _post(db_session, other_user, wallet, categories["Salary"], "20")

        with pytest.raises(InsufficientRoleError):
            await LedgerService(db_session).reverse_transaction(other_user, original.id)

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, db_session, test_user):
        wallet = await _create_wallet(db_session, test_user)

        with pytest.raises(NotFoundError) as exc_info:
            await LedgerService(db_session).reverse_transaction(test_user, wallet.id)
        assert exc_info.value.error_code == "API_006"


class TestBalanceReplay:
    """The cached balance always equals the signed sum of the log."""

    @pytest.mark.asyncio
    async def test_balance_matches_replay_after_mixed_history(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        service = LedgerService(db_session)
        entries = [
            ("Salary", "1500.00"),
            ("Food & Dining", "12.34"),
            ("Transportation", "40"),
            ("Freelance", "250.10"),
            ("Bills & Utilities", "99.99"),
        ]
        posted = []
        for name, amount in entries:
            transaction, wallet = await _post(db_session, test_user, wallet, categories[name], amount)
            posted.append(transaction)
        await service.reverse_transaction(test_user, posted[1].id)

        report = await service.verify_balance(test_user, wallet.id)

        expected = Decimal("1500.00") - Decimal("40") + Decimal("250.10") - Decimal("99.99")
        assert report.in_sync
        assert report.balance == expected
        assert report.replayed_balance == expected

    @pytest.mark.asyncio
    async def test_repair_resets_drifted_balance(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        _, wallet = await _post(db_session, test_user, wallet, categories["Salary"], "10")
        db_session.add(wallet)
        wallet.balance = 123456
        await db_session.commit()
        service = LedgerService(db_session)

        assert not (await service.verify_balance(test_user, wallet.id)).in_sync
        repaired = await service.repair_balance(test_user, wallet.id)

        assert repaired.in_sync
        assert repaired.balance == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_repair_requires_owner(self, db_session, test_user, other_user):
        wallet = await _create_wallet(db_session, test_user, type="shared")
        await _add_member(db_session, wallet, other_user, "manager")

        with pytest.raises(InsufficientRoleError):
            await LedgerService(db_session).repair_balance(other_user, wallet.id)


class TestListTransactions:
    @pytest.mark.asyncio
    async def test_newest_first_with_paging_and_days(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        today = utc_today()
        for days_ago in (40, 10, 1):
            await _post(
                db_session,
                test_user,
                wallet,
                categories["Salary"],
                "1",
                txn_date=today - timedelta(days=days_ago),
            )
        service = LedgerService(db_session)

        everything = await service.list_transactions(test_user, wallet.id)
        recent = await service.list_transactions(test_user, wallet.id, days=30)
        page = await service.list_transactions(test_user, wallet.id, limit=1, offset=1)

        assert [t.txn_date for t in everything] == sorted((t.txn_date for t in everything), reverse=True)
        assert len(recent) == 2
        assert page[0].id == everything[1].id

    @pytest.mark.asyncio
    async def test_get_transaction_requires_membership(self, db_session, test_user, other_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        transaction, _ = await _post(db_session, test_user, wallet, categories["Salary"], "1")

        with pytest.raises(NotMemberError):
            await LedgerService(db_session).get_transaction(other_user, transaction.id)


class TestConcurrentPostings:
    @pytest.mark.asyncio
    async def test_concurrent_income_and_expense_both_land(
        self, db_session, session_factory, test_user, categories
    ):
        wallet = await _create_wallet(db_session, test_user, type="shared")

        async def post(category, amount):
            async with session_factory() as session:
                data = TransactionCreate(
                    wallet_id=wallet.id,
                    category_id=category.id,
                    type=category.type,
                    amount=Decimal(amount),
                )
                return await LedgerService(session).post_transaction(test_user, data)

        await asyncio.gather(
            post(categories["Salary"], "10"),
            post(categories["Food & Dining"], "5"),
        )

        async with session_factory() as session:
            balance = await session.scalar(select(Wallet.balance).where(Wallet.id == wallet.id))
            count = await session.scalar(
                select(func.count(Transaction.id)).where(Transaction.wallet_id == wallet.id)
            )
        assert balance == 500
        assert count == 2


class TestConflictRetry:
    @pytest.mark.asyncio
    async def test_posting_retries_after_lost_race(
        self, db_session, test_user, categories, monkeypatch
    ):
        wallet = await _create_wallet(db_session, test_user)
        wallet_id = wallet.id
        actor = await db_session.scalar(select(User).where(User.id == test_user.id))
        compare_and_swap = WalletRepository.compare_and_swap
        seen_versions = []

        async def lose_first_race(self, wallet, balance_delta=0, **values):
            seen_versions.append(wallet.version)
            if len(seen_versions) == 1:
                raise StorageConflictError(details={"wallet_id": str(wallet.id)})
            return await compare_and_swap(self, wallet, balance_delta, **values)

        monkeypatch.setattr(WalletRepository, "compare_and_swap", lose_first_race)

        transaction, updated = await _post(db_session, actor, wallet, categories["Salary"], "10")

        assert len(seen_versions) == 2
        assert transaction.created_by == actor.id
        assert updated.balance == 1000
        count = await db_session.scalar(
            select(func.count(Transaction.id)).where(Transaction.wallet_id == wallet_id)
        )
        assert count == 1

    @pytest.mark.asyncio
    async def test_actor_usable_after_rejected_posting(self, db_session, test_user, categories):
        wallet = await _create_wallet(db_session, test_user)
        wallet_id = wallet.id

        with pytest.raises(CategoryTypeMismatchError):
            await _post(db_session, test_user, wallet, categories["Salary"], "10", type="expense")

        assert await LedgerService(db_session).get_balance(test_user, wallet_id) == 0
