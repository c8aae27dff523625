"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import DateTime, Enum, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid6 import uuid7


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def enum_column_type(enum_cls: type[StrEnum], name: str) -> Enum:
    """
    Build a portable string-backed Enum column type.

    Stores the enum *values* (e.g. 'UI/UX') rather than member names, and uses a
    CHECK constraint instead of a native database enum so the column works on
    both PostgreSQL and SQLite.
    """
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=max(len(member.value) for member in enum_cls),
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDv7Mixin:
    """
    Mixin that adds a time-ordered UUIDv7 primary key.

    UUIDv7 embeds a millisecond timestamp, so ids created later sort after ids
    created earlier. The feed uses id as the final, deterministic tiebreaker.
    """

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    All timestamps are timezone-aware. Values are generated in Python so they keep
    microsecond precision on every backend (SQLite's CURRENT_TIMESTAMP only has
    second precision, which would make "newest first" ordering ambiguous).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,  # Index for "newest"/"oldest" and tiebreak ordering
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
