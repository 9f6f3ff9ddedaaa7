"""
User Data Access Object.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.dao.base import BaseDAO
from orgkit.models.user import User


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address (case-insensitive).

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise

        Example:
            >>> user = await user_dao.get_by_email("Jane@Example.com")
            >>> user.email
            'jane@example.com'
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(func.lower(User.email) == email.lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None
