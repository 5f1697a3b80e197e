"""Custom exception classes for wallet and ledger operations.

This module defines the hierarchy of exceptions raised by the services.
Each exception maps to an error code defined in errors.py and carries the
HTTP status the API layer returns for it.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all wallet/ledger errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "RBAC_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return
    """

    default_code = "SYS_001"
    default_status = 500

    def __init__(
        self,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        """Initialize the exception.

        Args:
            error_code: Error code from errors.py (defaults to the class code)
            details: Additional error context (not shown to users)
            http_status: HTTP status code (defaults to the class status)
        """
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(self.error_code)


class NotMemberError(LedgerError):
    """Raised when the caller has no membership row for the wallet."""

    default_code = "RBAC_001"
    default_status = 403


class InsufficientRoleError(LedgerError):
    """Raised when the caller's role ranks below the action's minimum role."""

    default_code = "RBAC_002"
    default_status = 403


class RoleEscalationError(LedgerError):
    """Raised when granting a role the caller is not allowed to grant.

    Covers invitations above the inviter's rank, removing a member who
    outranks the caller, and any attempt to grant ``owner``.
    """

    default_code = "RBAC_003"
    default_status = 403


class LastOwnerError(LedgerError):
    """Raised when an operation would demote or remove the wallet owner."""

    default_code = "RBAC_004"
    default_status = 409


class InvalidSpecError(LedgerError):
    """Raised for invalid amounts, dates, currencies or wallet settings."""

    default_code = "VAL_002"
    default_status = 400


class CategoryTypeMismatchError(LedgerError):
    """Raised when a transaction or budget type disagrees with its category."""

    default_code = "LEDGER_001"
    default_status = 400


class TransactionAlreadyReversedError(InvalidSpecError):
    """Raised when reversing a reversal or an already reversed transaction."""

    default_code = "LEDGER_002"
    default_status = 409


class InvitationNotFoundError(LedgerError):
    """Raised when an invitation does not exist or is no longer pending.

    INV_001 for missing invitations, INV_004 for ones already resolved.
    """

    default_code = "INV_001"
    default_status = 404


class InvitationExpiredError(LedgerError):
    """Raised when accepting an invitation past its TTL."""

    default_code = "INV_002"
    default_status = 410


class EmailMismatchError(LedgerError):
    """Raised when the accepting identity's email differs from the invitation."""

    default_code = "INV_003"
    default_status = 403


class NotFoundError(LedgerError):
    """Raised when a wallet, transaction, category, budget or member is missing."""

    default_code = "API_003"
    default_status = 404


class ConflictError(LedgerError):
    """Raised when a request conflicts with existing state (e.g. already a member)."""

    default_code = "API_010"
    default_status = 409


class StorageConflictError(LedgerError):
    """Raised when a concurrent write won the race for the same wallet.

    Services retry these internally; callers only see one after the retry
    budget is exhausted.
    """

    default_code = "DB_003"
    default_status = 409
