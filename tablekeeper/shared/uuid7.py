"""UUID7 implementation for time-ordered UUIDs."""

import time
import uuid
from typing import Any

from sqlalchemy import TypeDecorator, Uuid


def uuid7() -> uuid.UUID:
    """Generate UUID7 (time-ordered UUID).

    The format follows the UUID version 7 layout:
    - 48 bits: Unix timestamp in milliseconds
    - 4 bits: Version (7)
    - 12 bits: Random
    - 2 bits: Variant (RFC 4122)
    - 62 bits: Random

    Returns:
        A new UUID7 instance.
    """
    timestamp_ms = int(time.time() * 1000)
    rand = uuid.uuid4().int
    uuid_int = timestamp_ms << 80
    uuid_int |= 0x7 << 76
    uuid_int |= ((rand >> 64) & 0xFFF) << 64
    uuid_int |= 0x2 << 62
    uuid_int |= rand & ((1 << 62) - 1)
    return uuid.UUID(int=uuid_int)


class UUID7(TypeDecorator):
    """SQLAlchemy TypeDecorator for UUID7 columns.

    Native UUID on PostgreSQL, CHAR(32) on backends without a UUID type
    (SQLite in tests). Strings are accepted on bind and coerced to UUID.

    Example:
        class User(Base):
            id: Mapped[uuid.UUID] = mapped_column(UUID7, primary_key=True, default=uuid7)
    """

    impl = Uuid
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))

    def process_result_value(self, value: Any, dialect) -> uuid.UUID | None:
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))
