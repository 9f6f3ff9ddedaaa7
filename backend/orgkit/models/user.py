"""
User model.

Users are identified by an externally issued id (e.g. the identity
provider's subject) rather than a generated key.
"""

import enum
from typing import Optional

from sqlalchemy import Boolean, Column, Enum, JSON, String
from sqlalchemy.orm import relationship

from orgkit.models.base import Base, TimestampMixin


class SystemRole(str, enum.Enum):
    """System-wide role, independent of organization membership."""

    USER = "user"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    """
    User model.

    public_keys is a JSON list of {"name": ..., "key": ...} entries with
    names unique within the list. key_pair, when set, is a JSON object with
    "public_key" and "private_key".
    """

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, default="", index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    role = Column(
        Enum(SystemRole, name="system_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=SystemRole.USER,
    )
    public_keys = Column(JSON, nullable=False, default=list)
    key_pair = Column(JSON, nullable=True)

    # Membership rows are removed by the database cascade; organizations
    # created by the user are left alone.
    organization_users = relationship(
        "OrganizationUser",
        back_populates="user",
        passive_deletes="all",
    )

    def is_admin(self) -> bool:
        return self.role == SystemRole.ADMIN

    def has_verified_email(self) -> bool:
        return bool(self.email_verified)

    def add_public_key(self, name: str, key: str) -> None:
        """Add a public key, replacing any existing key with the same name."""
        # Assign a new list so the JSON column is flagged as modified
        keys = [k for k in (self.public_keys or []) if k["name"] != name]
        keys.append({"name": name, "key": key})
        self.public_keys = keys

    def remove_public_key(self, name: str) -> bool:
        """
        Remove a public key by name.

        Returns:
            True if a key was removed, False if no key had that name
        """
        if not self.public_keys:
            return False

        keys = [k for k in self.public_keys if k["name"] != name]
        removed = len(keys) < len(self.public_keys)
        self.public_keys = keys
        return removed

    def get_public_key(self, name: str) -> Optional[dict]:
        for entry in self.public_keys or []:
            if entry["name"] == name:
                return entry
        return None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
