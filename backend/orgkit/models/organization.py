"""
Organization model.

An organization is the billing, quota and isolation boundary that groups
users (through OrganizationUser memberships) and resource limits.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text
from sqlalchemy.orm import relationship

from orgkit.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, as_naive_utc, utcnow

# Applied both as column defaults and on construction, so that a transient
# Organization() already carries its quotas.
QUOTA_DEFAULTS = {
    "total_cpu_quota": 10,
    "total_memory_quota": 10,
    "total_disk_quota": 30,
    "max_cpu_per_sandbox": 4,
    "max_memory_per_sandbox": 8,
    "max_disk_per_sandbox": 10,
    "max_snapshot_size": 20,
    "snapshot_quota": 100,
    "volume_quota": 100,
}

PERSONAL_ORGANIZATION_INDEX = "uq_organizations_personal_creator"


@dataclass(frozen=True)
class QuotaUsage:
    """Aggregate resource consumption of an organization."""

    cpu: int = 0
    memory: int = 0
    disk: int = 0


class Organization(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Organization model.

    created_by is a plain user id, not a foreign key: referential integrity
    to users is the caller's responsibility, and deleting a user never
    removes the organizations they created.

    Suspension is lazily expired: once suspended_until has passed the
    organization is treated as active even though the suspended flag stays
    set until unsuspend() clears it.
    """

    __tablename__ = "organizations"
    __table_args__ = (
        # At most one personal organization per creator
        Index(
            PERSONAL_ORGANIZATION_INDEX,
            "created_by",
            unique=True,
            postgresql_where=text("personal"),
            sqlite_where=text("personal"),
        ),
    )

    name = Column(String(255), nullable=False, index=True)
    created_by = Column(String(255), nullable=False, index=True)
    personal = Column(Boolean, nullable=False, default=False)
    telemetry_enabled = Column(Boolean, nullable=False, default=True)

    # Quotas
    total_cpu_quota = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["total_cpu_quota"])
    total_memory_quota = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["total_memory_quota"])
    total_disk_quota = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["total_disk_quota"])
    max_cpu_per_sandbox = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["max_cpu_per_sandbox"])
    max_memory_per_sandbox = Column(
        Integer, nullable=False, default=QUOTA_DEFAULTS["max_memory_per_sandbox"]
    )
    max_disk_per_sandbox = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["max_disk_per_sandbox"])
    max_snapshot_size = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["max_snapshot_size"])
    snapshot_quota = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["snapshot_quota"])
    volume_quota = Column(Integer, nullable=False, default=QUOTA_DEFAULTS["volume_quota"])

    # Suspension
    suspended = Column(Boolean, nullable=False, default=False, index=True)
    suspended_at = Column(DateTime, nullable=True)
    suspension_reason = Column(String(255), nullable=True)
    suspended_until = Column(DateTime, nullable=True)

    # Memberships belong exclusively to the organization; the database
    # cascade removes rows the session has not loaded.
    users = relationship(
        "OrganizationUser",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __init__(self, **kwargs: Any):
        for field, value in QUOTA_DEFAULTS.items():
            kwargs.setdefault(field, value)
        kwargs.setdefault("personal", False)
        kwargs.setdefault("telemetry_enabled", True)
        kwargs.setdefault("suspended", False)
        super().__init__(**kwargs)

    def is_suspended(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether the organization is suspended for policy purposes.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            False when not flagged, or when suspended_until has passed
        """
        if not self.suspended:
            return False

        if self.suspended_until is not None:
            now = as_naive_utc(now) if now is not None else utcnow()
            if as_naive_utc(self.suspended_until) <= now:
                return False

        return True

    def get_total_quota_usage(self) -> QuotaUsage:
        """
        Current aggregate usage.

        Usage is tracked outside this kit, so nothing is consumed here.
        """
        return QuotaUsage()

    def can_create_sandbox(
        self,
        cpu: int,
        memory: int,
        disk: int,
        usage: Optional[QuotaUsage] = None,
    ) -> bool:
        """
        Check whether a sandbox of the given size fits the organization's quotas.

        Both the total-quota headroom and the per-sandbox ceiling must hold
        for every dimension.

        Args:
            cpu: Requested CPU
            memory: Requested memory
            disk: Requested disk
            usage: Current aggregate usage (defaults to get_total_quota_usage())

        Returns:
            True if the sandbox can be created
        """
        if self.is_suspended():
            return False

        current = usage if usage is not None else self.get_total_quota_usage()

        return (
            current.cpu + cpu <= self.total_cpu_quota
            and current.memory + memory <= self.total_memory_quota
            and current.disk + disk <= self.total_disk_quota
            and cpu <= self.max_cpu_per_sandbox
            and memory <= self.max_memory_per_sandbox
            and disk <= self.max_disk_per_sandbox
        )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name}, personal={self.personal})>"
