"""
OrganizationUser (membership) model.

A membership grants one user one role inside one organization. The
(organization_id, user_id) pair is the primary key, so a user holds at most
one role per organization.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, String
from sqlalchemy.orm import relationship

from orgkit.models.base import Base, TimestampMixin


class OrganizationMemberRole(str, enum.Enum):
    """Role of a user inside an organization."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class OrganizationUser(Base, TimestampMixin):
    """Membership of a user in an organization."""

    __tablename__ = "organization_users"

    organization_id = Column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(
        String(255),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role = Column(
        Enum(
            OrganizationMemberRole,
            name="organization_member_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=OrganizationMemberRole.MEMBER,
    )

    organization = relationship("Organization", back_populates="users")
    user = relationship("User", back_populates="organization_users")

    def is_owner(self) -> bool:
        return self.role == OrganizationMemberRole.OWNER

    def is_admin(self) -> bool:
        return self.role == OrganizationMemberRole.ADMIN

    def is_member(self) -> bool:
        return self.role == OrganizationMemberRole.MEMBER

    def has_admin_access(self) -> bool:
        return self.is_owner() or self.is_admin()

    def can_manage_users(self) -> bool:
        return self.is_owner() or self.is_admin()

    def can_manage_settings(self) -> bool:
        # Settings are owner-only
        return self.is_owner()

    def __repr__(self) -> str:
        return (
            f"<OrganizationUser(organization_id={self.organization_id}, "
            f"user_id={self.user_id}, role={self.role})>"
        )
