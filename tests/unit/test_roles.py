"""Unit tests for the role hierarchy and capability checks."""

import pytest

from spendwise.core.exceptions import InsufficientRoleError, NotMemberError
from spendwise.core.roles import (
    ACTION_MIN_ROLE,
    Action,
    Role,
    authorize,
    is_allowed,
    outranks,
    rank,
)

ROLES_ASCENDING = [Role.VIEWER, Role.CONTRIBUTOR, Role.MANAGER, Role.OWNER]


class TestRoleRank:
    def test_ranks_are_strictly_ordered(self):
        ranks = [rank(role) for role in ROLES_ASCENDING]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    def test_rank_accepts_plain_strings(self):
        assert rank("owner") == rank(Role.OWNER)

    def test_outranks_is_strict(self):
        assert outranks(Role.OWNER, Role.MANAGER)
        assert not outranks(Role.MANAGER, Role.MANAGER)
        assert not outranks("viewer", "contributor")


class TestIsAllowed:
    @pytest.mark.parametrize(
        "role, action, expected",
        [
            (Role.VIEWER, Action.VIEW, True),
            (Role.VIEWER, Action.CREATE_TRANSACTION, False),
            (Role.CONTRIBUTOR, Action.CREATE_TRANSACTION, True),
            (Role.CONTRIBUTOR, Action.MANAGE_BUDGET, False),
            (Role.MANAGER, Action.MANAGE_BUDGET, True),
            (Role.MANAGER, Action.INVITE_MEMBER, True),
            (Role.MANAGER, Action.REVERSE_TRANSACTION, True),
            (Role.MANAGER, Action.CHANGE_ROLE, False),
            (Role.MANAGER, Action.DELETE_WALLET, False),
            (Role.OWNER, Action.CHANGE_ROLE, True),
            (Role.OWNER, Action.DELETE_WALLET, True),
        ],
    )
    def test_action_table(self, role, action, expected):
        assert is_allowed(role, action) is expected

    def test_non_member_is_never_allowed(self):
        assert not any(is_allowed(None, action) for action in Action)

    @pytest.mark.parametrize("action", list(Action))
    def test_monotonic_in_rank(self, action):
        """If a role may do something, every higher role may too."""
        allowed = [is_allowed(role, action) for role in ROLES_ASCENDING]
        first = allowed.index(True)
        assert all(allowed[first:])
        assert not any(allowed[:first])

    def test_every_action_has_a_minimum_role(self):
        assert set(ACTION_MIN_ROLE) == set(Action)


class TestAuthorize:
    def test_allowed_returns_none(self):
        assert authorize(Role.CONTRIBUTOR, Action.CREATE_TRANSACTION) is None

    def test_no_role_raises_not_member(self):
        with pytest.raises(NotMemberError) as exc_info:
            authorize(None, Action.VIEW)
        assert exc_info.value.error_code == "RBAC_001"
        assert exc_info.value.http_status == 403

    def test_low_role_raises_insufficient_role(self):
        with pytest.raises(InsufficientRoleError) as exc_info:
            authorize("viewer", Action.CREATE_TRANSACTION)
        assert exc_info.value.error_code == "RBAC_002"
        assert exc_info.value.details == {
            "action": "create_transaction",
            "role": "viewer",
            "required": "contributor",
        }
