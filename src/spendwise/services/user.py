"""User service: mirror identity-provider claims into local user rows."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from spendwise.core.security import IdentityClaims
from spendwise.models.user import User
from spendwise.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service resolving token identities to users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def get_or_create(self, claims: IdentityClaims) -> User:
        """Return the user for ``claims``, creating or refreshing it as needed.

        Email and display name follow the latest token so invitations keep
        matching after the identity provider changes them.
        """
        user = await self.user_repo.get_by_subject(claims.subject)
        if user is not None:
            changes = {}
            if user.email != claims.email:
                changes["email"] = claims.email
            if claims.display_name and user.display_name != claims.display_name:
                changes["display_name"] = claims.display_name
            if changes:
                try:
                    await self.user_repo.update(user, changes)
                    await self.db.commit()
                except Exception:
                    await self.db.rollback()
                    raise
            return user

        try:
            user = await self.user_repo.add(
                User(
                    subject=claims.subject,
                    email=claims.email,
                    display_name=claims.display_name,
                    is_active=True,
                )
            )
            await self.db.commit()
        except IntegrityError:
            # Another request registered the same subject first.
            await self.db.rollback()
            user = await self.user_repo.get_by_subject(claims.subject)
            if user is None:
                raise
            return user

        logger.info("User registered from identity token", extra={"user_id": str(user.id)})
        return user
