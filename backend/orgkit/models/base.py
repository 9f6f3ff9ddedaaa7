"""
Base model class for all SQLAlchemy models.

Timestamps are stored as naive UTC datetimes so that PostgreSQL and SQLite
compare them the same way.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps to models."""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class UUIDPrimaryKeyMixin:
    """
    Mixin to add a generated UUID primary key to models.

    The id is produced client-side, so it is known before the INSERT and
    identical across database backends.
    """

    id = Column(String(36), primary_key=True, default=generate_uuid)
