"""
User Service.

Registration and public-key credential management for users. Membership
of users in organizations is handled by OrganizationService.
"""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.core.exceptions import UserAlreadyExistsError, UserNotFoundError
from orgkit.dao.user import UserDAO
from orgkit.models.user import User
from orgkit.schemas.user import UserCreate
from orgkit.schemas.validation import validate_input

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    def __init__(self, session: AsyncSession):
        """
        Initialize UserService.

        Args:
            session: Async database session of the current unit of work
        """
        self.session = session
        self.user_dao = UserDAO(session)

    async def create_user(self, data: Optional[UserCreate] = None, **fields: Any) -> User:
        """
        Register a user.

        Args:
            data: UserCreate input; keyword fields are validated into one
                when omitted

        Returns:
            Created User

        Raises:
            UserAlreadyExistsError: If the id or a non-empty email is taken
            ValidationError: If the keyword fields do not form a valid UserCreate
        """
        if data is None:
            data = validate_input(UserCreate, fields, "Invalid user")

        if await self.user_dao.get_by_id(data.id) is not None:
            raise UserAlreadyExistsError(
                message="User with this id already exists",
                user_id=data.id,
            )
        if data.email and await self.user_dao.email_exists(data.email):
            raise UserAlreadyExistsError(
                message="User with this email already exists",
                email=data.email,
            )

        user = await self.user_dao.create(**data.model_dump())
        logger.info(f"Created user {user.id}")
        return user

    async def get(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If no user has this id
        """
        user = await self.user_dao.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(message=f"User with ID {user_id} not found", user_id=user_id)
        return user

    async def verify_email(self, user_id: str) -> User:
        user = await self.get(user_id)
        return await self.user_dao.save(user, email_verified=True)

    async def add_public_key(self, user_id: str, name: str, key: str) -> User:
        """Add or replace a named public key."""
        user = await self.get(user_id)
        user.add_public_key(name, key)
        await self.session.flush()
        return user

    async def remove_public_key(self, user_id: str, name: str) -> bool:
        """
        Remove a named public key.

        Returns:
            False if the user had no key with that name
        """
        user = await self.get(user_id)
        removed = user.remove_public_key(name)
        if removed:
            await self.session.flush()
        return removed

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a user.

        The database cascade removes the user's memberships; organizations
        the user created are kept.

        Raises:
            UserNotFoundError: If no user has this id
        """
        if not await self.user_dao.delete(user_id):
            raise UserNotFoundError(message=f"User with ID {user_id} not found", user_id=user_id)
        logger.info(f"Deleted user {user_id}")
