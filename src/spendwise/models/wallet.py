"""Wallet and wallet membership models."""
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from spendwise.models.base import BaseModel


class Wallet(BaseModel):
    """Wallet model: a named ledger with a cached balance.

    ``balance`` is a projection of the transaction log (minor units) and is
    only written by the ledger service. ``version`` is bumped by every
    wallet-scoped write and used as a compare-and-swap guard.
    """

    __tablename__ = "wallets"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    goal_amount: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    goal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Wallet(id={self.id}, type={self.type}, balance={self.balance})>"


class WalletMember(BaseModel):
    """Membership of a user in a wallet with a role."""

    __tablename__ = "wallet_members"
    __table_args__ = (UniqueConstraint("wallet_id", "user_id", name="uq_wallet_member"),)

    wallet_id: Mapped[UUID] = mapped_column(
        ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    invited_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<WalletMember(wallet_id={self.wallet_id}, user_id={self.user_id}, role={self.role})>"
