"""Error codes and user-friendly messages.

This module defines the error catalog for wallet and ledger operations.
Each error has:
- error_code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

# Error catalog for wallet and ledger operations
ERROR_CATALOG: dict[str, dict] = {
    "RBAC_001": {
        "code": "RBAC_001",
        "message": "Caller is not a member of the wallet",
        "user_message": "You don't have access to this wallet.",
        "suggestion": "Ask a wallet manager to invite you.",
        "retry_allowed": False,
    },
    "RBAC_002": {
        "code": "RBAC_002",
        "message": "Caller's wallet role is below the role required for this action",
        "user_message": "Your role in this wallet doesn't allow this action.",
        "suggestion": "Ask the wallet owner to change your role.",
        "retry_allowed": False,
    },
    "RBAC_003": {
        "code": "RBAC_003",
        "message": "Requested role is above what the caller may grant",
        "user_message": "You can't grant a role higher than your own.",
        "suggestion": "Choose a lower role, or ask the wallet owner.",
        "retry_allowed": False,
    },
    "RBAC_004": {
        "code": "RBAC_004",
        "message": "Operation would leave the wallet without an owner",
        "user_message": "A wallet must always keep its owner.",
        "suggestion": "The owner can delete the wallet instead.",
        "retry_allowed": False,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request payload failed validation",
        "user_message": "Invalid input data",
        "suggestion": "Please check your input and try again",
        "retry_allowed": True,
    },
    "VAL_002": {
        "code": "VAL_002",
        "message": "Invalid amount, date, currency or wallet settings",
        "user_message": "Some of the values you entered aren't valid.",
        "suggestion": "Check amounts are positive and dates are not in the past.",
        "retry_allowed": False,
    },
    "LEDGER_001": {
        "code": "LEDGER_001",
        "message": "Transaction type does not match the category type",
        "user_message": "That category can't be used for this kind of transaction.",
        "suggestion": "Pick an income category for income and an expense category for expenses.",
        "retry_allowed": False,
    },
    "LEDGER_002": {
        "code": "LEDGER_002",
        "message": "Transaction was already reversed or is itself a reversal",
        "user_message": "This transaction can't be reversed.",
        "suggestion": "Each transaction can be reversed only once.",
        "retry_allowed": False,
    },
    "INV_001": {
        "code": "INV_001",
        "message": "Invitation not found",
        "user_message": "We couldn't find this invitation.",
        "suggestion": "Ask the wallet manager to send a new invitation.",
        "retry_allowed": False,
    },
    "INV_002": {
        "code": "INV_002",
        "message": "Invitation has expired",
        "user_message": "This invitation has expired.",
        "suggestion": "Ask the wallet manager to send a new invitation.",
        "retry_allowed": False,
    },
    "INV_003": {
        "code": "INV_003",
        "message": "Invitation was issued to a different email address",
        "user_message": "This invitation was sent to a different email address.",
        "suggestion": "Sign in with the account the invitation was sent to.",
        "retry_allowed": False,
    },
    "INV_004": {
        "code": "INV_004",
        "message": "Invitation is no longer pending",
        "user_message": "This invitation has already been used.",
        "suggestion": "Refresh your invitations list.",
        "retry_allowed": False,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "A database error occurred",
        "suggestion": "Please try again later",
        "retry_allowed": True,
    },
    "DB_002": {
        "code": "DB_002",
        "message": "Resource already exists",
        "user_message": "This record already exists",
        "suggestion": "Please check if the record was already created",
        "retry_allowed": False,
    },
    "DB_003": {
        "code": "DB_003",
        "message": "Concurrent update conflict persisted after retries",
        "user_message": "The wallet was busy with other changes.",
        "suggestion": "Please try again in a moment.",
        "retry_allowed": True,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal server error",
        "user_message": "An unexpected error occurred",
        "suggestion": "Please try again later or contact support",
        "retry_allowed": True,
    },
    # API-specific errors
    "API_003": {
        "code": "API_003",
        "message": "Wallet not found",
        "user_message": "We couldn't find this wallet.",
        "suggestion": "Please check the wallet ID and try again.",
        "retry_allowed": False,
    },
    "API_005": {
        "code": "API_005",
        "message": "Member not found",
        "user_message": "That person isn't a member of this wallet.",
        "suggestion": "Refresh the member list and try again.",
        "retry_allowed": False,
    },
    "API_006": {
        "code": "API_006",
        "message": "Transaction not found",
        "user_message": "We couldn't find this transaction.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_007": {
        "code": "API_007",
        "message": "Category not found",
        "user_message": "That category doesn't exist.",
        "suggestion": "Please choose a category from the list.",
        "retry_allowed": False,
    },
    "API_008": {
        "code": "API_008",
        "message": "Budget not found",
        "user_message": "We couldn't find this budget.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "API_009": {
        "code": "API_009",
        "message": "Category belongs to another user",
        "user_message": "You can only edit categories you created.",
        "suggestion": "Create your own category instead.",
        "retry_allowed": False,
    },
    "API_010": {
        "code": "API_010",
        "message": "Request conflicts with existing state",
        "user_message": "This change conflicts with the wallet's current state.",
        "suggestion": "Refresh and try again.",
        "retry_allowed": False,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details. Unknown codes map to a generic definition.
    """
    if error_code not in ERROR_CATALOG:
        # Return a generic error if code not found
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]
