"""SQLAlchemy declarative base and shared column helpers."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, MappedColumn, mapped_column

# text[] on PostgreSQL, JSON everywhere else (the SQLite test database)
StringList = JSON().with_variant(ARRAY(Text), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def utc_now() -> datetime:
    """Return current UTC datetime for use as default value."""
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid4())


def uuid_pk() -> MappedColumn[str]:
    """Primary key column holding a string UUID."""
    return mapped_column(UUID(as_uuid=False), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps.

    Collections are loaded in created_at order, so created_at is also set on
    the Python side to keep ordering stable on databases with coarse
    ``now()`` resolution.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
