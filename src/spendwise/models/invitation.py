"""Invitation model: a pending membership grant for an email address."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from spendwise.models.base import BaseModel


class Invitation(BaseModel):
    """Wallet invitation (pending -> accepted | declined | expired)."""

    __tablename__ = "wallet_invitations"

    wallet_id: Mapped[UUID] = mapped_column(
        ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    invited_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_wallet_invitations_email_status", "email", "status"),
    )

    def __repr__(self) -> str:
        return f"<Invitation(id={self.id}, wallet_id={self.wallet_id}, status={self.status})>"
