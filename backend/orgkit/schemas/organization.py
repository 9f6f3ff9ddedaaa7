"""
Pydantic schemas for organization operations.

Input schemas validate what callers hand to OrganizationService; output
schemas carry the aggregate reads that are not plain model rows.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from orgkit.models.organization_user import OrganizationMemberRole


class OrganizationCreate(BaseModel):
    """Organization creation input."""

    name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    personal: bool = Field(default=False, description="Whether this is the creator's personal organization")

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Acme Corporation", "personal": False}}
    )


class OrganizationQuotaUpdate(BaseModel):
    """
    Partial quota update.

    Only fields that are set (and not None) overwrite the stored value.
    Values are taken as-is; no range is enforced.
    """

    total_cpu_quota: Optional[int] = None
    total_memory_quota: Optional[int] = None
    total_disk_quota: Optional[int] = None
    max_cpu_per_sandbox: Optional[int] = None
    max_memory_per_sandbox: Optional[int] = None
    max_disk_per_sandbox: Optional[int] = None
    max_snapshot_size: Optional[int] = None
    snapshot_quota: Optional[int] = None
    volume_quota: Optional[int] = None

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"total_cpu_quota": 75}},
    )

    def changes(self) -> Dict[str, int]:
        """Fields to overwrite."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class UsageOverview(BaseModel):
    """Quota totals next to current usage."""

    total_cpu_quota: int
    total_gpu_quota: int = 0
    total_memory_quota: int
    total_disk_quota: int
    current_cpu_usage: int = 0
    current_memory_usage: int = 0
    current_disk_usage: int = 0


class OrganizationStatistics(BaseModel):
    """Aggregate counts over all organizations."""

    total_organizations: int = 0
    active_organizations: int = 0
    suspended_organizations: int = 0
    personal_organizations: int = 0
    average_cpu_quota: float = 0.0


class RoleStatistics(BaseModel):
    """Membership counts for one role."""

    role: OrganizationMemberRole
    organization_count: int = 0
    member_count: int = 0


class MemberSummary(BaseModel):
    """Per-user membership totals."""

    user_id: str
    total_organizations: int = 0
    owned_organizations: int = 0
    admin_organizations: int = 0
    personal_organizations: int = 0
    active_organizations: int = 0
