"""FastAPI dependency injection for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.security import get_identity_from_token
from spendwise.db.session import get_db
from spendwise.models.user import User
from spendwise.services.user import UserService

# Bearer token scheme; the token comes from the identity provider
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the caller from the bearer token.

    Args:
        credentials: HTTP bearer token credentials
        db: Database session

    Returns:
        Authenticated user object (created on first use)

    Raises:
        HTTPException: If the token is missing, invalid or expired, or the
            user is deactivated
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        claims = get_identity_from_token(credentials.credentials)
    except JWTError:
        raise credentials_exception

    user = await UserService(db).get_or_create(claims)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user

