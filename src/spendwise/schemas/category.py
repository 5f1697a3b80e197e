"""Category request/response schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CategoryType = Literal["income", "expense"]


class CategoryCreate(BaseModel):
    """Request model for creating a custom category."""

    name: str = Field(..., min_length=1, max_length=255)
    type: CategoryType
    icon: str | None = Field(None, max_length=100, description="Icon class, e.g. 'fas fa-tag'")
    color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$", description="Hex color")


class CategoryUpdate(BaseModel):
    """Cosmetic edits; a category's type never changes."""

    name: str | None = Field(None, min_length=1, max_length=255)
    icon: str | None = Field(None, max_length=100)
    color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    type: CategoryType
    icon: str | None
    color: str | None
    is_default: bool
    created_by: UUID | None


class SeedResult(BaseModel):
    created: int = Field(description="Number of default categories inserted")
