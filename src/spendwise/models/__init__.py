"""Database models."""
from spendwise.models.user import User
from spendwise.models.wallet import Wallet, WalletMember
from spendwise.models.category import Category
from spendwise.models.transaction import Transaction
from spendwise.models.budget import Budget
from spendwise.models.invitation import Invitation

__all__ = ["User", "Wallet", "WalletMember", "Category", "Transaction", "Budget", "Invitation"]
