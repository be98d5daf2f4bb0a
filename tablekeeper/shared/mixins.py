"""SQLAlchemy model mixins for common functionality."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from .uuid7 import UUID7, uuid7


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class UUIDMixin:
    """Mixin providing a UUID7 primary key.

    UUID7 is preferred over UUID4 for primary keys as it keeps
    index locality (ids are time-ordered).

    Example:
        class User(UUIDMixin, Base):
            __tablename__ = "users"
            name: Mapped[str] = mapped_column(String(100))
    """

    id: Mapped[uuid.UUID] = mapped_column(
        UUID7,
        primary_key=True,
        default=uuid7,
        nullable=False,
    )


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps.

    Values are set on the Python side so that they are available
    right after flush without a refresh.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
