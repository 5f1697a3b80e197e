"""Budget model: a per-category spending limit for a recurring period."""
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from spendwise.models.base import BaseModel


class Budget(BaseModel):
    """Budget limit. Spent amounts are always recomputed from transactions."""

    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("wallet_id", "category_id", "period", name="uq_budget_wallet_category_period"),
    )

    wallet_id: Mapped[UUID] = mapped_column(
        ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[UUID] = mapped_column(ForeignKey("categories.id"), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    period: Mapped[str] = mapped_column(String(20), nullable=False, default="monthly")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<Budget(id={self.id}, wallet_id={self.wallet_id}, period={self.period})>"
