"""User model for identities handed over by the identity provider."""
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from spendwise.models.base import BaseModel


class User(BaseModel):
    """User model representing an authenticated identity.

    Rows are upserted from verified token claims; the service never
    registers or deletes users on its own.
    """

    __tablename__ = "users"

    subject: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, subject={self.subject}, is_active={self.is_active})>"
