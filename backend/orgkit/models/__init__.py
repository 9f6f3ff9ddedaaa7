"""
Database models package.

Importing this package registers every table on Base.metadata, which both
Database.create_all() and Alembic rely on.
"""

from orgkit.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from orgkit.models.organization import (
    Organization,
    QuotaUsage,
    QUOTA_DEFAULTS,
    PERSONAL_ORGANIZATION_INDEX,
)
from orgkit.models.organization_user import OrganizationUser, OrganizationMemberRole
from orgkit.models.user import User, SystemRole

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "utcnow",
    "Organization",
    "QuotaUsage",
    "QUOTA_DEFAULTS",
    "PERSONAL_ORGANIZATION_INDEX",
    "OrganizationUser",
    "OrganizationMemberRole",
    "User",
    "SystemRole",
]
