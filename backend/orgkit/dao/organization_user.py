"""
OrganizationUser (membership) Data Access Object.

Memberships have a composite key, so lookups take both the organization
and the user id instead of BaseDAO.get_by_id.
"""

from typing import Dict, List, Optional

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.dao.base import BaseDAO
from orgkit.models.organization_user import OrganizationMemberRole, OrganizationUser


class OrganizationUserDAO(BaseDAO[OrganizationUser]):
    """Data Access Object for OrganizationUser model."""

    def __init__(self, session: AsyncSession):
        """Initialize OrganizationUserDAO with session."""
        super().__init__(OrganizationUser, session)

    async def add_member(
        self,
        organization_id: str,
        user_id: str,
        role: OrganizationMemberRole = OrganizationMemberRole.MEMBER,
    ) -> OrganizationUser:
        """
        Insert a membership row.

        Raises:
            IntegrityError: If the membership exists or either id is unknown
        """
        return await self.create(organization_id=organization_id, user_id=user_id, role=role)

    async def get_membership(self, organization_id: str, user_id: str) -> Optional[OrganizationUser]:
        result = await self.session.execute(
            select(OrganizationUser).where(
                OrganizationUser.organization_id == organization_id,
                OrganizationUser.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_organization(self, organization_id: str) -> List[OrganizationUser]:
        result = await self.session.execute(
            select(OrganizationUser)
            .where(OrganizationUser.organization_id == organization_id)
            .order_by(OrganizationUser.created_at)
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> List[OrganizationUser]:
        result = await self.session.execute(
            select(OrganizationUser)
            .where(OrganizationUser.user_id == user_id)
            .order_by(OrganizationUser.created_at)
        )
        return list(result.scalars().all())

    async def update_role(
        self,
        organization_id: str,
        user_id: str,
        role: OrganizationMemberRole,
    ) -> Optional[OrganizationUser]:
        """
        Change a member's role.

        Returns:
            Updated membership, or None if the user is not a member
        """
        membership = await self.get_membership(organization_id, user_id)
        if membership is None:
            return None
        return await self.save(membership, role=role)

    async def remove_member(self, organization_id: str, user_id: str) -> bool:
        """
        Delete a membership row.

        Returns:
            True if a membership was removed, False if none existed
        """
        result = await self.session.execute(
            delete(OrganizationUser).where(
                OrganizationUser.organization_id == organization_id,
                OrganizationUser.user_id == user_id,
            )
        )
        return result.rowcount > 0

    async def count_by_role(self) -> Dict[OrganizationMemberRole, Dict[str, int]]:
        """
        Organization and member counts grouped by role.

        Returns:
            Mapping of role to {"organization_count", "member_count"}; roles
            without members are absent
        """
        result = await self.session.execute(
            select(
                OrganizationUser.role,
                func.count(distinct(OrganizationUser.organization_id)).label("organization_count"),
                func.count(OrganizationUser.user_id).label("member_count"),
            ).group_by(OrganizationUser.role)
        )
        return {
            row.role: {"organization_count": row.organization_count, "member_count": row.member_count}
            for row in result.all()
        }
