"""Wallet role hierarchy and capability checks.

Roles are strictly ordered; every role implies the rights of the roles
below it. The checks here are pure: they look only at the role passed in
and the action table, never at the database.
"""

from enum import Enum

from spendwise.core.exceptions import InsufficientRoleError, NotMemberError


class Role(str, Enum):
    """Membership role within a wallet."""

    VIEWER = "viewer"
    CONTRIBUTOR = "contributor"
    MANAGER = "manager"
    OWNER = "owner"


class Action(str, Enum):
    """Wallet-scoped actions gated by role."""

    VIEW = "view"
    CREATE_TRANSACTION = "create_transaction"
    REVERSE_TRANSACTION = "reverse_transaction"
    MANAGE_BUDGET = "manage_budget"
    UPDATE_WALLET = "update_wallet"
    INVITE_MEMBER = "invite_member"
    REMOVE_MEMBER = "remove_member"
    CHANGE_ROLE = "change_role"
    REPAIR_BALANCE = "repair_balance"
    DELETE_WALLET = "delete_wallet"


ROLE_RANK: dict[Role, int] = {
    Role.VIEWER: 0,
    Role.CONTRIBUTOR: 1,
    Role.MANAGER: 2,
    Role.OWNER: 3,
}

# Minimum role required for each action
ACTION_MIN_ROLE: dict[Action, Role] = {
    Action.VIEW: Role.VIEWER,
    Action.CREATE_TRANSACTION: Role.CONTRIBUTOR,
    Action.REVERSE_TRANSACTION: Role.MANAGER,
    Action.MANAGE_BUDGET: Role.MANAGER,
    Action.UPDATE_WALLET: Role.MANAGER,
    Action.INVITE_MEMBER: Role.MANAGER,
    Action.REMOVE_MEMBER: Role.MANAGER,
    Action.CHANGE_ROLE: Role.OWNER,
    Action.REPAIR_BALANCE: Role.OWNER,
    Action.DELETE_WALLET: Role.OWNER,
}


def rank(role: Role | str) -> int:
    """Return the numeric rank of a role (higher is more capable)."""
    return ROLE_RANK[Role(role)]


def is_allowed(role: Role | str | None, action: Action) -> bool:
    """Check whether a role may perform an action.

    Args:
        role: Caller's role in the wallet, or None when not a member
        action: Action being attempted

    Returns:
        True if the role ranks at or above the action's minimum role
    """
    if role is None:
        return False
    return rank(role) >= rank(ACTION_MIN_ROLE[action])


def authorize(role: Role | str | None, action: Action) -> None:
    """Raise unless ``role`` may perform ``action``.

    Raises:
        NotMemberError: If the caller has no role in the wallet
        InsufficientRoleError: If the role ranks below the required role
    """
    if role is None:
        raise NotMemberError(details={"action": action.value})
    if not is_allowed(role, action):
        raise InsufficientRoleError(
            details={
                "action": action.value,
                "role": Role(role).value,
                "required": ACTION_MIN_ROLE[action].value,
            }
        )


def outranks(role: Role | str, other: Role | str) -> bool:
    """Return True if ``role`` ranks strictly above ``other``."""
    return rank(role) > rank(other)
