"""
Organization Service.

Business logic for the organization lifecycle:
1. Creation limits and personal-organization uniqueness
2. Atomic create of an organization with its owner membership
3. Suspension policy with lazy expiry
4. Partial quota updates and the delete guard
5. Membership management and aggregate reads

Every method runs on the session handed to the constructor; the caller
owns commit and rollback of the surrounding unit of work.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Mapping, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.core.config import settings
from orgkit.core.exceptions import (
    CannotDeletePersonalOrganizationError,
    DuplicatePersonalOrganizationError,
    MembershipAlreadyExistsError,
    OrganizationLimitExceededError,
    OrganizationNotFoundError,
    OrganizationSuspendedError,
)
from orgkit.dao.organization import OrganizationDAO
from orgkit.dao.organization_user import OrganizationUserDAO
from orgkit.db.unit_of_work import transaction
from orgkit.models.base import as_naive_utc, utcnow
from orgkit.models.organization import PERSONAL_ORGANIZATION_INDEX, Organization
from orgkit.models.organization_user import OrganizationMemberRole, OrganizationUser
from orgkit.schemas.organization import (
    MemberSummary,
    OrganizationCreate,
    OrganizationQuotaUpdate,
    OrganizationStatistics,
    RoleStatistics,
    UsageOverview,
)
from orgkit.schemas.validation import validate_input

logger = logging.getLogger(__name__)

UNVERIFIED_EMAIL_SUSPENSION_REASON = "Please verify your email address"


def _violates_personal_index(exc: IntegrityError) -> bool:
    """
    Tell whether an IntegrityError comes from the personal-organization index.

    PostgreSQL names the index; SQLite names the indexed column.
    """
    message = str(exc.orig)
    return PERSONAL_ORGANIZATION_INDEX in message or "organizations.created_by" in message


class OrganizationService:
    """
    Service for organization lifecycle, quota and suspension operations.

    Example:
        >>> async with db.session() as session:
        ...     service = OrganizationService(session)
        ...     org = await service.create("Acme", "user-1", creator_email_verified=True)
        ...     await service.suspend(org.id, "policy")
    """

    def __init__(self, session: AsyncSession, max_organizations_per_user: Optional[int] = None):
        """
        Initialize OrganizationService.

        Args:
            session: Async database session of the current unit of work
            max_organizations_per_user: Creation limit per creator
                (defaults to settings.MAX_ORGANIZATIONS_PER_USER)
        """
        self.session = session
        self.organization_dao = OrganizationDAO(session)
        self.membership_dao = OrganizationUserDAO(session)
        self.max_organizations_per_user = (
            max_organizations_per_user
            if max_organizations_per_user is not None
            else settings.MAX_ORGANIZATIONS_PER_USER
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(
        self,
        organization: Union[str, OrganizationCreate],
        created_by: str,
        personal: Optional[bool] = None,
        creator_email_verified: bool = False,
    ) -> Organization:
        """
        Create an organization and make its creator the owner.

        The organization row and the owner membership are written in one
        unit of work: either both exist afterwards or neither does.

        Args:
            organization: Organization name or OrganizationCreate input
            created_by: ID of the creating user
            personal: Whether this is the creator's personal organization
                (overrides OrganizationCreate.personal when given)
            creator_email_verified: Whether the creator verified their email;
                if not, the organization is created suspended

        Returns:
            The organization with its membership collection loaded

        Raises:
            DuplicatePersonalOrganizationError: Creator already has a personal organization
            OrganizationLimitExceededError: Creator reached the organization limit
            ValidationError: If the name is empty or too long
        """
        data = (
            organization
            if isinstance(organization, OrganizationCreate)
            else validate_input(OrganizationCreate, {"name": organization}, "Invalid organization")
        )
        if personal is None:
            personal = data.personal

        if personal and await self.organization_dao.count_personal(created_by) > 0:
            raise DuplicatePersonalOrganizationError(created_by=created_by)

        created_count = await self.organization_dao.count_created_by(created_by)
        if created_count >= self.max_organizations_per_user:
            raise OrganizationLimitExceededError(
                created_by=created_by,
                limit=self.max_organizations_per_user,
            )

        org = Organization(name=data.name, created_by=created_by, personal=personal)

        if not creator_email_verified:
            org.suspended = True
            org.suspended_at = utcnow()
            org.suspension_reason = UNVERIFIED_EMAIL_SUSPENSION_REASON

        try:
            async with transaction(self.session):
                self.session.add(org)
                await self.session.flush()

                await self.membership_dao.add_member(
                    organization_id=org.id,
                    user_id=created_by,
                    role=OrganizationMemberRole.OWNER,
                )
        except IntegrityError as exc:
            # Lost the race against a concurrent personal-organization create
            if personal and _violates_personal_index(exc):
                raise DuplicatePersonalOrganizationError(created_by=created_by) from exc
            raise

        created = await self.organization_dao.get_with_members(org.id)
        logger.info(
            f"Created organization {created.id} for {created_by} "
            f"(personal={personal}, suspended={created.suspended})"
        )
        return created

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_one(self, organization_id: str) -> Optional[Organization]:
        """Find an organization by id, with its members."""
        return await self.organization_dao.get_with_members(organization_id)

    async def get(self, organization_id: str) -> Organization:
        """
        Get an organization by id, with its members.

        Raises:
            OrganizationNotFoundError: If no organization has this id
        """
        org = await self.organization_dao.get_with_members(organization_id)
        if org is None:
            raise OrganizationNotFoundError(
                message=f"Organization with ID {organization_id} not found",
                organization_id=organization_id,
            )
        return org

    async def find_by_user(self, user_id: str) -> List[Organization]:
        """Organizations the user is a member of."""
        return await self.organization_dao.find_by_member(user_id)

    async def find_personal(self, user_id: str) -> Organization:
        """
        The user's personal organization.

        Raises:
            OrganizationNotFoundError: If the user has no personal organization
        """
        org = await self.organization_dao.find_personal(user_id)
        if org is None:
            raise OrganizationNotFoundError(
                message=f"Personal organization for user {user_id} not found",
                user_id=user_id,
            )
        return org

    async def find_by_user_role(
        self,
        role: OrganizationMemberRole,
        user_id: Optional[str] = None,
    ) -> List[Organization]:
        """Organizations with a member holding ``role`` (optionally a given member)."""
        return await self.organization_dao.find_by_member_role(OrganizationMemberRole(role), user_id)

    async def find_with_users(self) -> List[Organization]:
        """Organizations that have at least one member."""
        return await self.organization_dao.find_with_members()

    async def find_suspended_organizations(
        self,
        days_ago: int = 1,
        max_days_ago: int = 7,
    ) -> List[Organization]:
        """
        Suspended organizations whose suspension began between
        ``max_days_ago`` and ``days_ago`` days ago.

        Feeds a periodic sweep over stale suspensions; selection only.

        Args:
            days_ago: Suspensions newer than this are skipped
            max_days_ago: Suspensions older than this are skipped

        Returns:
            At most settings.SUSPENDED_SWEEP_LIMIT organizations
        """
        now = utcnow()
        return await self.organization_dao.find_suspended_between(
            suspended_after=now - timedelta(days=max_days_ago),
            suspended_before=now - timedelta(days=days_ago),
            limit=settings.SUSPENDED_SWEEP_LIMIT,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _get_plain(self, organization_id: str) -> Organization:
        org = await self.organization_dao.get_by_id(organization_id)
        if org is None:
            raise OrganizationNotFoundError(
                message=f"Organization with ID {organization_id} not found",
                organization_id=organization_id,
            )
        return org

    async def update_quota(
        self,
        organization_id: str,
        quota: Union[OrganizationQuotaUpdate, Mapping[str, Optional[int]]],
    ) -> Organization:
        """
        Overwrite the quota fields present in ``quota``; others keep their value.

        Args:
            organization_id: Organization ID
            quota: OrganizationQuotaUpdate or a mapping of quota field names

        Returns:
            Updated organization

        Raises:
            OrganizationNotFoundError: If no organization has this id
            ValidationError: If the mapping names an unknown field or a non-integer
        """
        if not isinstance(quota, OrganizationQuotaUpdate):
            quota = validate_input(OrganizationQuotaUpdate, quota, "Invalid quota update")

        org = await self._get_plain(organization_id)
        changes = quota.changes()
        await self.organization_dao.save(org, **changes)

        logger.info(f"Updated quota of organization {organization_id}: {sorted(changes)}")
        return org

    async def suspend(
        self,
        organization_id: str,
        reason: Optional[str] = None,
        until: Optional[datetime] = None,
    ) -> Organization:
        """
        Suspend an organization, overwriting any previous suspension.

        Args:
            organization_id: Organization ID
            reason: Why the organization is suspended
            until: When the suspension lapses on its own

        Raises:
            OrganizationNotFoundError: If no organization has this id
        """
        org = await self._get_plain(organization_id)
        await self.organization_dao.save(
            org,
            suspended=True,
            suspension_reason=reason or None,
            suspended_until=as_naive_utc(until),
            suspended_at=utcnow(),
        )
        logger.info(f"Suspended organization {organization_id} (reason={reason!r}, until={until})")
        return org

    async def unsuspend(self, organization_id: str) -> Organization:
        """
        Lift a suspension and clear its details. Idempotent.

        Raises:
            OrganizationNotFoundError: If no organization has this id
        """
        org = await self._get_plain(organization_id)
        await self.organization_dao.save(
            org,
            suspended=False,
            suspension_reason=None,
            suspended_until=None,
            suspended_at=None,
        )
        logger.info(f"Unsuspended organization {organization_id}")
        return org

    def assert_organization_is_not_suspended(self, organization: Organization) -> None:
        """
        Guard for actions that need an active organization.

        Uses Organization.is_suspended(), so a suspension whose
        suspended_until has passed does not block.

        Raises:
            OrganizationSuspendedError: If the organization is suspended
        """
        if organization.is_suspended():
            raise OrganizationSuspendedError(
                reason=organization.suspension_reason,
                organization_id=organization.id,
            )

    async def delete(self, organization_id: str, force: bool = False) -> None:
        """
        Delete an organization and, by cascade, its memberships.

        Args:
            organization_id: Organization ID
            force: Allow deleting a personal organization

        Raises:
            OrganizationNotFoundError: If no organization has this id
            CannotDeletePersonalOrganizationError: Personal organization without force
        """
        # Fresh membership collection, so the ORM cascade matches the table
        org = await self.get(organization_id)

        if org.personal and not force:
            raise CannotDeletePersonalOrganizationError(organization_id=organization_id)

        await self.organization_dao.delete_instance(org)
        logger.info(f"Deleted organization {organization_id} (force={force})")

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def add_member(
        self,
        organization_id: str,
        user_id: str,
        role: OrganizationMemberRole = OrganizationMemberRole.MEMBER,
    ) -> Organization:
        """
        Add a user to an active organization.

        Returns:
            The organization with its refreshed membership collection

        Raises:
            OrganizationNotFoundError: If no organization has this id
            OrganizationSuspendedError: If the organization is suspended
            MembershipAlreadyExistsError: If the user is already a member
        """
        org = await self.get(organization_id)
        self.assert_organization_is_not_suspended(org)

        if await self.membership_dao.get_membership(organization_id, user_id) is not None:
            raise MembershipAlreadyExistsError(organization_id=organization_id, user_id=user_id)

        async with transaction(self.session):
            await self.membership_dao.add_member(organization_id, user_id, OrganizationMemberRole(role))

        logger.info(f"Added {user_id} to organization {organization_id} as {OrganizationMemberRole(role).value}")
        return await self.organization_dao.get_with_members(organization_id)

    async def change_member_role(
        self,
        organization_id: str,
        user_id: str,
        role: OrganizationMemberRole,
    ) -> OrganizationUser:
        """
        Change a member's role.

        Raises:
            OrganizationNotFoundError: If the user is not a member of the organization
        """
        membership = await self.membership_dao.update_role(
            organization_id, user_id, OrganizationMemberRole(role)
        )
        if membership is None:
            raise OrganizationNotFoundError(
                message=f"User {user_id} is not a member of organization {organization_id}",
                organization_id=organization_id,
                user_id=user_id,
            )
        return membership

    async def remove_member(self, organization_id: str, user_id: str) -> bool:
        """Remove a membership; False if the user was not a member."""
        removed = await self.membership_dao.remove_member(organization_id, user_id)
        if removed:
            logger.info(f"Removed {user_id} from organization {organization_id}")
        return removed

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def get_usage_overview(self, organization_id: str) -> UsageOverview:
        """
        Quota totals next to current usage.

        Raises:
            OrganizationNotFoundError: If no organization has this id
        """
        org = await self._get_plain(organization_id)
        usage = org.get_total_quota_usage()
        return UsageOverview(
            total_cpu_quota=org.total_cpu_quota,
            total_memory_quota=org.total_memory_quota,
            total_disk_quota=org.total_disk_quota,
            current_cpu_usage=usage.cpu,
            current_memory_usage=usage.memory,
            current_disk_usage=usage.disk,
        )

    async def get_statistics(self) -> OrganizationStatistics:
        return OrganizationStatistics(**await self.organization_dao.get_statistics())

    async def get_role_statistics(self) -> List[RoleStatistics]:
        """Per-role organization and member counts, one entry per role."""
        counts = await self.membership_dao.count_by_role()
        return [
            RoleStatistics(role=role, **counts.get(role, {}))
            for role in OrganizationMemberRole
        ]

    async def get_member_summary(self, user_id: str) -> MemberSummary:
        return MemberSummary(user_id=user_id, **await self.organization_dao.get_member_summary(user_id))
