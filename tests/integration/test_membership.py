"""Integration tests for wallet membership and role management."""

from decimal import Decimal

import pytest

from spendwise.core.exceptions import (
    InsufficientRoleError,
    InvalidSpecError,
    LastOwnerError,
    NotFoundError,
    NotMemberError,
    RoleEscalationError,
)
from spendwise.models.wallet import WalletMember
from spendwise.schemas.wallet import WalletCreate, WalletUpdate
from spendwise.services.membership import MembershipService
from spendwise.services.wallet import WalletService


@pytest.fixture
async def shared_wallet(db_session, test_user, other_user, third_user):
    """Wallet owned by test_user with other_user as manager and third_user as viewer."""
    wallet = await WalletService(db_session).create_wallet(
        test_user, WalletCreate(name="Household", type="shared")
    )
    db_session.add_all(
        [
            WalletMember(wallet_id=wallet.id, user_id=other_user.id, role="manager"),
            WalletMember(wallet_id=wallet.id, user_id=third_user.id, role="viewer"),
        ]
    )
    await db_session.commit()
    return wallet


class TestChangeRole:
    @pytest.mark.asyncio
    async def test_owner_promotes_viewer(self, db_session, test_user, third_user, shared_wallet):
        member = await MembershipService(db_session).change_role(
            test_user, shared_wallet.id, third_user.id, "contributor"
        )

        assert member.role == "contributor"

    @pytest.mark.asyncio
    async def test_owner_cannot_demote_self(self, db_session, test_user, shared_wallet):
        wallet_id = shared_wallet.id
        with pytest.raises(LastOwnerError):
            await MembershipService(db_session).change_role(
                test_user, wallet_id, test_user.id, "manager"
            )

        members = await MembershipService(db_session).list_members(test_user, wallet_id)
        roles = {user.id: member.role for member, user in members}
        assert roles[test_user.id] == "owner"

    @pytest.mark.asyncio
    async def test_cannot_grant_owner(self, db_session, test_user, other_user, shared_wallet):
        with pytest.raises(RoleEscalationError):
            await MembershipService(db_session).change_role(
                test_user, shared_wallet.id, other_user.id, "owner"
            )

    @pytest.mark.asyncio
    async def test_manager_cannot_change_roles(self, db_session, other_user, third_user, shared_wallet):
        with pytest.raises(InsufficientRoleError):
            await MembershipService(db_session).change_role(
                other_user, shared_wallet.id, third_user.id, "contributor"
            )

    @pytest.mark.asyncio
    async def test_unknown_member(self, db_session, test_user, shared_wallet):
        with pytest.raises(NotFoundError) as exc_info:
            await MembershipService(db_session).change_role(
                test_user, shared_wallet.id, shared_wallet.id, "viewer"
            )
        assert exc_info.value.error_code == "API_005"

    @pytest.mark.asyncio
    async def test_role_change_bumps_version(self, db_session, test_user, third_user, shared_wallet):
        version = shared_wallet.version

        await MembershipService(db_session).change_role(
            test_user, shared_wallet.id, third_user.id, "manager"
        )

        await db_session.refresh(shared_wallet)
        assert shared_wallet.version == version + 1


class TestRemoveMember:
    @pytest.mark.asyncio
    async def test_manager_removes_viewer(self, db_session, other_user, third_user, shared_wallet):
        service = MembershipService(db_session)

        await service.remove_member(other_user, shared_wallet.id, third_user.id)

        members = await service.list_members(other_user, shared_wallet.id)
        assert third_user.id not in {user.id for _, user in members}

    @pytest.mark.asyncio
    async def test_manager_cannot_remove_peer(self, db_session, test_user, other_user, third_user, shared_wallet):
        service = MembershipService(db_session)
        await service.change_role(test_user, shared_wallet.id, third_user.id, "manager")

        with pytest.raises(RoleEscalationError):
            await service.remove_member(other_user, shared_wallet.id, third_user.id)

    @pytest.mark.asyncio
    async def test_viewer_cannot_remove_others(self, db_session, other_user, third_user, shared_wallet):
        with pytest.raises(InsufficientRoleError):
            await MembershipService(db_session).remove_member(
                third_user, shared_wallet.id, other_user.id
            )

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, db_session, test_user, other_user, shared_wallet):
        with pytest.raises(LastOwnerError):
            await MembershipService(db_session).remove_member(
                other_user, shared_wallet.id, test_user.id
            )

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(self, db_session, test_user, shared_wallet):
        with pytest.raises(LastOwnerError):
            await MembershipService(db_session).remove_member(
                test_user, shared_wallet.id, test_user.id
            )

    @pytest.mark.asyncio
    async def test_viewer_can_leave(self, db_session, third_user, shared_wallet):
        service = MembershipService(db_session)

        await service.remove_member(third_user, shared_wallet.id, third_user.id)

        with pytest.raises(NotMemberError):
            await service.list_members(third_user, shared_wallet.id)


class TestWalletAccess:
    @pytest.mark.asyncio
    async def test_wallet_list_shows_role_and_counts(self, db_session, test_user, other_user, shared_wallet):
        result = await WalletService(db_session).list_wallets(other_user)

        assert len(result.wallets) == 1
        item = result.wallets[0]
        assert item.id == shared_wallet.id
        assert item.role == "manager"
        assert item.member_count == 3
        assert item.transaction_count == 0

    @pytest.mark.asyncio
    async def test_archived_wallets_hidden_by_default(self, db_session, test_user, shared_wallet):
        service = WalletService(db_session)
        await service.update_wallet(test_user, shared_wallet.id, WalletUpdate(is_archived=True))

        assert (await service.list_wallets(test_user)).wallets == []
        assert len((await service.list_wallets(test_user, include_archived=True)).wallets) == 1

    @pytest.mark.asyncio
    async def test_viewer_cannot_update_wallet(self, db_session, third_user, shared_wallet):
        with pytest.raises(InsufficientRoleError):
            await WalletService(db_session).update_wallet(
                third_user, shared_wallet.id, WalletUpdate(name="Mine now")
            )

    @pytest.mark.asyncio
    async def test_only_owner_deletes(self, db_session, test_user, other_user, shared_wallet):
        service = WalletService(db_session)
        wallet_id = shared_wallet.id

        with pytest.raises(InsufficientRoleError):
            await service.delete_wallet(other_user, wallet_id)

        await service.delete_wallet(test_user, wallet_id)
        with pytest.raises(NotFoundError):
            await service.get_wallet(test_user, wallet_id)

    @pytest.mark.asyncio
    async def test_wallet_detail_lists_members(self, db_session, third_user, shared_wallet):
        detail = await WalletService(db_session).get_wallet(third_user, shared_wallet.id)

        assert detail.role == "viewer"
        assert sorted(m.role for m in detail.members) == ["manager", "owner", "viewer"]


class TestSavingsGoal:
    @pytest.mark.asyncio
    async def test_goal_progress(self, db_session, test_user):
        wallet = await WalletService(db_session).create_wallet(
            test_user,
            WalletCreate(name="Bike", type="savings_goal", goal_amount=Decimal("200")),
        )

        assert await WalletService(db_session).progress(test_user, wallet.id) == 0.0

    @pytest.mark.asyncio
    async def test_goal_only_on_savings_wallets(self, db_session, test_user):
        with pytest.raises(InvalidSpecError):
            await WalletService(db_session).create_wallet(
                test_user, WalletCreate(name="Daily", goal_amount=Decimal("10"))
            )
