"""Current identity endpoint."""

from fastapi import APIRouter, Depends

from spendwise.api.deps import get_current_user
from spendwise.models.user import User
from spendwise.schemas.user import CurrentUser

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=CurrentUser,
    summary="Get current user",
    description="Return the user resolved from the bearer token (created on first use).",
)
async def get_me(current_user: User = Depends(get_current_user)) -> CurrentUser:
    return CurrentUser.model_validate(current_user)
