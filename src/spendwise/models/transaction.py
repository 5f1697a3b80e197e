"""Transaction model: one immutable entry of a wallet's ledger."""
from datetime import date
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from spendwise.models.base import BaseModel


class Transaction(BaseModel):
    """Ledger entry.

    ``amount`` is always positive (minor units); the sign comes from ``type``.
    A row with ``reversal_of_id`` set cancels the balance effect of the
    referenced transaction.
    """

    __tablename__ = "transactions"

    wallet_id: Mapped[UUID] = mapped_column(
        ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    txn_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    reversal_of_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("transactions.id"), nullable=True, unique=True
    )

    __table_args__ = (
        Index("ix_transactions_wallet_id_txn_date", "wallet_id", "txn_date"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    @property
    def is_reversal(self) -> bool:
        return self.reversal_of_id is not None

    @property
    def signed_amount(self) -> int:
        """Balance effect of this entry in minor units."""
        signed = self.amount if self.type == "income" else -self.amount
        return -signed if self.is_reversal else signed

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.type}, amount={self.amount})>"
