"""
Organization Data Access Object.

Read paths return organizations with their memberships eagerly loaded,
since lazy loading is not available on an AsyncSession.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from orgkit.dao.base import BaseDAO
from orgkit.models.organization import Organization
from orgkit.models.organization_user import OrganizationMemberRole, OrganizationUser


class OrganizationDAO(BaseDAO[Organization]):
    """Data Access Object for Organization model."""

    def __init__(self, session: AsyncSession):
        """Initialize OrganizationDAO with session."""
        super().__init__(Organization, session)

    def _with_members(self):
        # populate_existing: memberships may have been inserted or deleted
        # through OrganizationUserDAO since the organization was loaded
        return (
            select(Organization)
            .options(selectinload(Organization.users))
            .execution_options(populate_existing=True)
        )

    async def get_with_members(self, organization_id: str) -> Optional[Organization]:
        """
        Retrieve an organization with its current membership collection.

        Args:
            organization_id: Organization ID

        Returns:
            Organization if found, None otherwise
        """
        result = await self.session.execute(self._with_members().where(Organization.id == organization_id))
        return result.scalar_one_or_none()

    async def count_created_by(self, created_by: str) -> int:
        """Count every organization created by a user, personal or not."""
        return await self.count(created_by=created_by)

    async def count_personal(self, created_by: str) -> int:
        """Count personal organizations created by a user (0 or 1 when consistent)."""
        return await self.count(created_by=created_by, personal=True)

    async def find_personal(self, created_by: str) -> Optional[Organization]:
        result = await self.session.execute(
            self._with_members().where(
                Organization.created_by == created_by,
                Organization.personal.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def find_by_member(self, user_id: str) -> List[Organization]:
        """
        Organizations the user is a member of, in any role.

        Args:
            user_id: Member's user ID

        Returns:
            Organizations ordered by creation time
        """
        result = await self.session.execute(
            self._with_members()
            .where(Organization.users.any(OrganizationUser.user_id == user_id))
            .order_by(Organization.created_at, Organization.name)
        )
        return list(result.scalars().all())

    async def find_by_member_role(
        self,
        role: OrganizationMemberRole,
        user_id: Optional[str] = None,
    ) -> List[Organization]:
        """
        Organizations having a member with the given role.

        Args:
            role: Membership role to match
            user_id: Restrict the match to this member

        Returns:
            Organizations ordered by creation time
        """
        condition = OrganizationUser.role == role
        if user_id is not None:
            condition = and_(condition, OrganizationUser.user_id == user_id)

        result = await self.session.execute(
            self._with_members()
            .where(Organization.users.any(condition))
            .order_by(Organization.created_at, Organization.name)
        )
        return list(result.scalars().all())

    async def find_with_members(self) -> List[Organization]:
        """Organizations that have at least one member."""
        result = await self.session.execute(
            self._with_members()
            .where(Organization.users.any())
            .order_by(Organization.created_at, Organization.name)
        )
        return list(result.scalars().all())

    async def find_suspended_between(
        self,
        suspended_after: datetime,
        suspended_before: datetime,
        limit: int = 100,
    ) -> List[Organization]:
        """
        Suspended organizations whose suspension started inside a window.

        Both bounds are exclusive.

        Args:
            suspended_after: Lower bound on suspended_at
            suspended_before: Upper bound on suspended_at
            limit: Maximum number of organizations to return

        Returns:
            Organizations ordered by suspended_at, oldest first
        """
        result = await self.session.execute(
            select(Organization)
            .where(
                Organization.suspended.is_(True),
                Organization.suspended_at < suspended_before,
                Organization.suspended_at > suspended_after,
            )
            .order_by(Organization.suspended_at)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_statistics(self) -> dict:
        """
        Aggregate counts over all organizations.

        Returns:
            Dictionary with total, active, suspended and personal counts and
            the average total CPU quota
        """
        rows = await self.fetch_raw(
            """
            SELECT
                COUNT(*) AS total_organizations,
                COALESCE(SUM(CASE WHEN suspended THEN 0 ELSE 1 END), 0) AS active_organizations,
                COALESCE(SUM(CASE WHEN suspended THEN 1 ELSE 0 END), 0) AS suspended_organizations,
                COALESCE(SUM(CASE WHEN personal THEN 1 ELSE 0 END), 0) AS personal_organizations,
                COALESCE(AVG(total_cpu_quota), 0) AS average_cpu_quota
            FROM organizations
            """
        )
        return rows[0]

    async def get_member_summary(self, user_id: str) -> dict:
        """
        Membership totals for one user.

        Args:
            user_id: Member's user ID

        Returns:
            Dictionary with total, owned, admin, personal and active counts
        """
        result = await self.session.execute(
            select(
                func.count(OrganizationUser.organization_id).label("total_organizations"),
                func.count(OrganizationUser.organization_id)
                .filter(OrganizationUser.role == OrganizationMemberRole.OWNER)
                .label("owned_organizations"),
                func.count(OrganizationUser.organization_id)
                .filter(OrganizationUser.role == OrganizationMemberRole.ADMIN)
                .label("admin_organizations"),
                func.count(OrganizationUser.organization_id)
                .filter(Organization.personal.is_(True))
                .label("personal_organizations"),
                func.count(OrganizationUser.organization_id)
                .filter(Organization.suspended.is_(False))
                .label("active_organizations"),
            )
            .select_from(OrganizationUser)
            .join(Organization, Organization.id == OrganizationUser.organization_id)
            .where(OrganizationUser.user_id == user_id)
        )
        return dict(result.mappings().one())
