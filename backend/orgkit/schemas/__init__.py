"""Pydantic schemas"""

from orgkit.schemas.organization import (
    MemberSummary,
    OrganizationCreate,
    OrganizationQuotaUpdate,
    OrganizationStatistics,
    RoleStatistics,
    UsageOverview,
)
from orgkit.schemas.user import UserCreate, UserKeyPair, UserPublicKey
from orgkit.schemas.validation import validate_input

__all__ = [
    "MemberSummary",
    "OrganizationCreate",
    "OrganizationQuotaUpdate",
    "OrganizationStatistics",
    "RoleStatistics",
    "UsageOverview",
    "UserCreate",
    "UserKeyPair",
    "UserPublicKey",
    "validate_input",
]
