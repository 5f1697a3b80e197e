"""Category catalog endpoints."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.api.deps import get_current_user, get_db
from spendwise.models.user import User
from spendwise.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    SeedResult,
)
from spendwise.services.category import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
    description="Default categories plus the caller's own, sorted by name.",
)
async def list_categories(
    type: Literal["income", "expense"] | None = Query(None, description="Filter by category type"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryResponse]:
    categories = await CategoryService(db).list_categories(current_user, type=type)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a custom category",
)
async def create_category(
    payload: CategoryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await CategoryService(db).create_category(current_user, payload)
    return CategoryResponse.model_validate(category)


@router.post(
    "/seed",
    response_model=SeedResult,
    summary="Seed default categories",
    description="Insert any missing default categories. Safe to call repeatedly.",
)
async def seed_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SeedResult:
    created = await CategoryService(db).seed_default_categories()
    return SeedResult(created=created)


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Edit a custom category",
    description="Change name, icon or color of a category you created. The type cannot change.",
)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    category = await CategoryService(db).update_category(current_user, category_id, payload)
    return CategoryResponse.model_validate(category)
