"""User service mirroring token identities into the users table."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.dependencies import AuthenticatedUser
from ..models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Service for user-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def sync_user(self, identity: AuthenticatedUser) -> User:
        """
        Create or refresh the user row for an authenticated caller.

        Profile fields are only overwritten when the token carries them.
        Does not commit; the caller's unit of work does.

        Args:
            identity: Decoded bearer token

        Returns:
            The persistent user entity
        """
        role = settings.admin_role if identity.is_admin else "user"
        user = await self.get_user(identity.user_id)

        if user is None:
            user = User(
                user_id=identity.user_id,
                full_name=identity.name,
                email=identity.email or f"user-{identity.user_id}@unknown.invalid",
                phone_number=identity.phone_number,
                role=role,
            )
            self.db.add(user)
            await self.db.flush()
            logger.info(
                "User mirrored from token",
                extra={"user_id": identity.user_id, "role": role}
            )
            return user

        if identity.name:
            user.full_name = identity.name
        if identity.email:
            user.email = identity.email
        if identity.phone_number:
            user.phone_number = identity.phone_number
        user.role = role
        await self.db.flush()
        return user
