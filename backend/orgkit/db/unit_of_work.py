"""
Unit-of-work helpers.

Services never swap their DAOs for transactional ones: they receive the
session explicitly and scope atomic blocks with ``transaction(session)``.
A block that is allowed to fail without aborting its caller is run with
``run_sub_unit`` and reports the outcome as a SubUnitResult.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Make the enclosed block all-or-nothing.

    Opens a SAVEPOINT when the session is already inside a transaction, so
    a failure rolls back only this block; otherwise opens a real transaction
    that commits on exit.

    Args:
        session: Session the block runs on

    Yields:
        The same session
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield session
    else:
        async with session.begin():
            yield session


@dataclass
class SubUnitResult(Generic[T]):
    """Outcome of a sub-unit of work."""

    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None

    def unwrap(self) -> T:
        """Return the value, re-raising the sub-unit's error if it failed."""
        if not self.ok:
            raise self.error
        return self.value


async def run_sub_unit(
    session: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> SubUnitResult[T]:
    """
    Run ``work`` under a savepoint and capture its outcome.

    Writes made by a failed sub-unit are rolled back; writes made earlier by
    the enclosing unit are kept. The caller decides whether a failure
    aborts the outer unit (``result.unwrap()``) or triggers a fallback.

    Args:
        session: Session of the enclosing unit of work
        work: Coroutine function called as ``work(session, *args, **kwargs)``

    Returns:
        SubUnitResult with the value on success or the exception on failure
    """
    try:
        async with session.begin_nested():
            value = await work(session, *args, **kwargs)
    except Exception as exc:
        logger.warning(f"Sub-unit {getattr(work, '__name__', work)!s} rolled back: {exc}")
        return SubUnitResult(ok=False, error=exc)
    return SubUnitResult(ok=True, value=value)
