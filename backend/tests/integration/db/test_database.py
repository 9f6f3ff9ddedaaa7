"""
Integration tests for the Database handle.

WHAT: Tests for Database.session(), foreign key enforcement and maintenance helpers.

WHY: Verifies that:
1. A session scope commits on success and rolls back on error
2. SQLite enforces foreign keys and their cascades
3. clear(), ping() and URL rewriting behave as documented

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
Sessions come from Database.session() instead of the rolled-back
db_session fixture, so commits are real.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from orgkit.core.exceptions import DatabaseConnectionError
from orgkit.db.session import Database
from orgkit.models.organization import Organization
from orgkit.models.organization_user import OrganizationMemberRole, OrganizationUser
from orgkit.models.user import User

from tests.factories import MembershipFactory, OrganizationFactory, UserFactory


async def count_rows(database: Database, model) -> int:
    async with database.session() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


class TestSessionScope:
    """Tests for commit and rollback of Database.session()."""

    @pytest.mark.asyncio
    async def test_commits_on_exit(self, database):
        """Test that leaving the scope normally commits."""
        async with database.session() as session:
            await UserFactory.create(session, id="u1")

        assert await count_rows(database, User) == 1

    @pytest.mark.asyncio
    async def test_rolls_back_on_exception(self, database):
        """Test that an exception inside the scope discards its writes."""
        with pytest.raises(RuntimeError):
            async with database.session() as session:
                await UserFactory.create(session, id="u1")
                raise RuntimeError("boom")

        assert await count_rows(database, User) == 0

    @pytest.mark.asyncio
    async def test_objects_readable_after_commit(self, database):
        """Test that attributes stay loaded after the session closes."""
        async with database.session() as session:
            org = await OrganizationFactory.create(session, name="Acme")

        assert org.name == "Acme"
        assert org.total_cpu_quota == 10


class TestForeignKeys:
    """Tests for foreign key enforcement and cascades on SQLite."""

    @pytest.mark.asyncio
    async def test_deleting_organization_row_removes_memberships(self, database):
        """Test that deleting organization rows cascades to memberships."""
        async with database.session() as session:
            await UserFactory.create(session, id="u1")
            org = await OrganizationFactory.create(session)
            await MembershipFactory.create(session, org, "u1", OrganizationMemberRole.OWNER)

        async with database.session() as session:
            await session.execute(Organization.__table__.delete())

        assert await count_rows(database, OrganizationUser) == 0
        assert await count_rows(database, User) == 1

    @pytest.mark.asyncio
    async def test_deleting_user_row_keeps_created_organizations(self, database):
        """Test that deleting user rows removes memberships but not organizations."""
        async with database.session() as session:
            await UserFactory.create(session, id="u1")
            org = await OrganizationFactory.create(session, created_by="u1")
            await MembershipFactory.create(session, org, "u1", OrganizationMemberRole.OWNER)

        async with database.session() as session:
            await session.execute(User.__table__.delete())

        assert await count_rows(database, OrganizationUser) == 0
        assert await count_rows(database, Organization) == 1

    @pytest.mark.asyncio
    async def test_membership_requires_existing_user(self, database):
        """Test that a membership for an unknown user is rejected."""
        with pytest.raises(IntegrityError):
            async with database.session() as session:
                org = await OrganizationFactory.create(session)
                await MembershipFactory.create(session, org, "ghost")


class TestMaintenance:
    """Tests for clear(), ping() and URL handling."""

    @pytest.mark.asyncio
    async def test_clear_removes_all_rows(self, database):
        """Test that clear() empties every table."""
        async with database.session() as session:
            await UserFactory.create(session, id="u1")
            org = await OrganizationFactory.create(session)
            await MembershipFactory.create(session, org, "u1")

        await database.clear()

        assert await count_rows(database, User) == 0
        assert await count_rows(database, Organization) == 0
        assert await count_rows(database, OrganizationUser) == 0

    @pytest.mark.asyncio
    async def test_ping(self, database):
        """Test pinging a reachable database."""
        await database.ping()

    @pytest.mark.asyncio
    async def test_ping_unreachable_database(self, tmp_path):
        """Test that an unreachable database raises DatabaseConnectionError."""
        db = Database(f"sqlite:///{tmp_path}/missing/dir/orgkit.db")
        try:
            with pytest.raises(DatabaseConnectionError):
                await db.ping()
        finally:
            await db.dispose()

    def test_plain_url_rewritten_to_async_driver(self):
        """Test that a plain SQLite URL gets the aiosqlite driver."""
        db = Database("sqlite:///:memory:")
        assert db.url == "sqlite+aiosqlite:///:memory:"
