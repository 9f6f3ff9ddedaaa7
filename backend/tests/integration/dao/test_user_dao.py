"""
Integration tests for User DAO.

WHAT: Tests for UserDAO lookups.

WHY: Verifies that:
1. Email lookups ignore case
2. Unknown filter fields are rejected instead of silently ignored

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest

from orgkit.dao.user import UserDAO

from tests.factories import UserFactory


class TestUserDAOQueries:
    """Tests for user lookups."""

    @pytest.mark.asyncio
    async def test_get_by_email_is_case_insensitive(self, db_session):
        """Test finding a user by email regardless of letter case."""
        await UserFactory.create(db_session, id="jane", email="jane@example.com")
        dao = UserDAO(db_session)

        found = await dao.get_by_email("Jane@Example.COM")

        assert found.id == "jane"
        assert await dao.get_by_email("john@example.com") is None

    @pytest.mark.asyncio
    async def test_email_exists(self, db_session):
        """Test the email existence check ignores case."""
        await UserFactory.create(db_session, id="jane", email="jane@example.com")
        dao = UserDAO(db_session)

        assert await dao.email_exists("JANE@example.com") is True
        assert await dao.email_exists("john@example.com") is False

    @pytest.mark.asyncio
    async def test_unknown_filter_field(self, db_session):
        """Test that counting by a field the model lacks raises AttributeError."""
        with pytest.raises(AttributeError):
            await UserDAO(db_session).count(nickname="x")
