"""
Unit tests for input schemas.

WHAT: Tests for the pydantic input schemas and validate_input.

WHY: Verifies that:
1. Quota updates report only the fields that were set
2. Unknown fields, empty names and malformed keys are rejected
3. validate_input reports failures as the kit's ValidationError, never pydantic's

HOW: Builds schemas directly; no database is needed.
"""

import pytest
from pydantic import ValidationError

from orgkit.core import exceptions
from orgkit.models.organization_user import OrganizationMemberRole
from orgkit.schemas import validate_input
from orgkit.schemas.organization import OrganizationCreate, OrganizationQuotaUpdate, RoleStatistics
from orgkit.schemas.user import UserCreate


class TestOrganizationQuotaUpdate:
    """Tests for partial quota updates."""

    def test_changes_only_set_fields(self):
        """Test that changes() holds only the given field."""
        update = OrganizationQuotaUpdate(total_cpu_quota=75)
        assert update.changes() == {"total_cpu_quota": 75}

    def test_none_is_not_a_change(self):
        """Test that None values are left out of changes()."""
        update = OrganizationQuotaUpdate(total_cpu_quota=None, volume_quota=5)
        assert update.changes() == {"volume_quota": 5}

    def test_empty_update(self):
        """Test an update with no fields."""
        assert OrganizationQuotaUpdate().changes() == {}

    def test_zero_and_negative_values_are_kept(self):
        """Test that zero and negative values count as changes."""
        update = OrganizationQuotaUpdate(snapshot_quota=0, max_disk_per_sandbox=-1)
        assert update.changes() == {"snapshot_quota": 0, "max_disk_per_sandbox": -1}

    def test_unknown_field_rejected(self):
        """Test that a field outside the quota set is rejected."""
        with pytest.raises(ValidationError):
            OrganizationQuotaUpdate(total_gpu_quota=4)

    def test_non_integer_rejected(self):
        """Test that a non-integer quota is rejected."""
        with pytest.raises(ValidationError):
            OrganizationQuotaUpdate(total_cpu_quota="lots")


class TestOrganizationCreate:
    """Tests for organization creation input."""

    def test_defaults_to_non_personal(self):
        """Test that organizations are not personal unless asked."""
        assert OrganizationCreate(name="Acme").personal is False

    def test_empty_name_rejected(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            OrganizationCreate(name="")


class TestUserCreate:
    """Tests for user creation input."""

    def test_public_keys_validated(self):
        """Test that well-formed public keys are kept as dicts."""
        data = UserCreate(id="u1", name="U", public_keys=[{"name": "laptop", "key": "k"}])
        assert data.model_dump()["public_keys"] == [{"name": "laptop", "key": "k"}]

    def test_key_without_name_rejected(self):
        """Test that a public key without a name is rejected."""
        with pytest.raises(ValidationError):
            UserCreate(id="u1", name="U", public_keys=[{"key": "k"}])


class TestRoleStatistics:
    """Tests for role statistics output."""

    def test_role_statistics_defaults(self):
        """Test the role is coerced and counts default to zero."""
        stats = RoleStatistics(role="owner")
        assert stats.role is OrganizationMemberRole.OWNER
        assert stats.organization_count == 0
        assert stats.member_count == 0


class TestValidateInput:
    """Tests for mapping schema failures onto the kit's ValidationError."""

    def test_valid_input(self):
        """Test that valid data returns the schema instance."""
        data = validate_input(OrganizationCreate, {"name": "Acme"}, "Invalid organization")
        assert isinstance(data, OrganizationCreate)
        assert data.name == "Acme"

    def test_invalid_input(self):
        """Test that invalid data raises the kit's ValidationError with messages."""
        with pytest.raises(exceptions.ValidationError) as exc_info:
            validate_input(OrganizationCreate, {"name": ""}, "Invalid organization")

        exc = exc_info.value
        assert not isinstance(exc, ValidationError)
        assert exc.status_code == 400
        assert exc.message == "Invalid organization"
        assert len(exc.context["errors"]) == 1
        assert isinstance(exc.__cause__, ValidationError)
