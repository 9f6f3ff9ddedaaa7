"""
Pytest configuration and fixtures.

Tests run against in-memory SQLite through aiosqlite. The Database handle
turns on foreign keys and savepoint support for SQLite, so membership
cascades and nested units of work behave as they do on PostgreSQL.
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from orgkit.db.session import Database
from orgkit.services.organization_service import OrganizationService
from orgkit.services.user_service import UserService

from tests.factories import UserFactory


TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def database() -> AsyncGenerator[Database, None]:
    """
    Create a fresh database with all tables.

    Function scope gives each test its own schema and data.
    """
    db = Database(TEST_ASYNC_DATABASE_URL)
    await db.create_all()

    yield db

    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    Everything the test writes is rolled back afterwards.
    """
    async with database.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def organization_service(db_session: AsyncSession) -> OrganizationService:
    return OrganizationService(db_session)


@pytest.fixture
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest_asyncio.fixture
async def user(db_session: AsyncSession):
    """Verified user "u1"."""
    return await UserFactory.create(db_session, id="u1", email="u1@example.com")


@pytest_asyncio.fixture
async def other_users(db_session: AsyncSession):
    """Users "u2" and "u3"."""
    return [
        await UserFactory.create(db_session, id="u2", email="u2@example.com"),
        await UserFactory.create(db_session, id="u3", email="u3@example.com", email_verified=False),
    ]
