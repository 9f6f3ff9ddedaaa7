"""
Database handle and session management.

There is no module-level engine: a Database is constructed by whoever owns
the process (or the test) and passed down. Each logical unit of work checks
out one AsyncSession, and with it one pooled connection, for its duration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orgkit.core.config import Settings, async_url, settings as default_settings
from orgkit.core.exceptions import DatabaseConnectionError
from orgkit.models import Base

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def _install_sqlite_pragmas(engine: AsyncEngine) -> None:
    """
    Make SQLite behave like the production database.

    Foreign keys are off by default in SQLite, which would disable the
    membership cascade. The driver's own BEGIN handling breaks SAVEPOINT,
    so BEGIN is emitted explicitly instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Owner of the engine and session factory.

    Example:
        >>> db = Database("sqlite+aiosqlite:///:memory:")
        >>> await db.create_all()
        >>> async with db.session() as session:
        ...     service = OrganizationService(session)
        ...     await service.create("Acme", "user-1", creator_email_verified=True)
        >>> await db.dispose()
    """

    def __init__(self, url: Optional[str] = None, config: Optional[Settings] = None):
        """
        Create the engine and session factory.

        Args:
            url: Database URL; plain postgresql:// and sqlite:// URLs are
                rewritten to their async drivers
            config: Settings to read defaults from
        """
        self.config = config or default_settings
        self.url = async_url(url or self.config.DATABASE_URL)

        engine_kwargs = {"echo": self.config.DEBUG, "pool_pre_ping": True}
        if _is_sqlite(self.url):
            if make_url(self.url).database in (None, "", ":memory:"):
                # Every connection to :memory: is a new database; share one
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = self.config.DB_POOL_SIZE
            engine_kwargs["max_overflow"] = self.config.DB_MAX_OVERFLOW

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        if _is_sqlite(self.url):
            _install_sqlite_pragmas(self.engine)

        # expire_on_commit=False keeps returned objects readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Session scoped to one unit of work.

        Commits when the block exits normally, rolls back on any exception,
        and always closes the session so the connection returns to the pool.

        Yields:
            AsyncSession: Database session for the unit of work
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create all tables (tests and local use; production uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Created schema on %s", self.engine.url.render_as_string(hide_password=True))

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def clear(self) -> None:
        """Delete every row, children before parents."""
        async with self.engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                await conn.execute(table.delete())
        logger.info("Cleared all tables")

    async def ping(self) -> None:
        """
        Verify the database is reachable.

        Raises:
            DatabaseConnectionError: If a connection cannot be opened
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except OperationalError as exc:
            logger.error(f"Database ping failed: {exc}")
            raise DatabaseConnectionError(
                url=self.engine.url.render_as_string(hide_password=True)
            ) from exc

    async def dispose(self) -> None:
        """Close all pooled connections (call on shutdown)."""
        await self.engine.dispose()
