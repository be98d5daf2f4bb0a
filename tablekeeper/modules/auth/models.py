"""Authentication-related SQLAlchemy models."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from tablekeeper.core.database import Base
from tablekeeper.shared.mixins import TimestampMixin, UUIDMixin, as_utc, utcnow
from tablekeeper.shared.uuid7 import UUID7


class RefreshToken(UUIDMixin, TimestampMixin, Base):
    """Refresh token bound to one user.

    Only the SHA-256 of the raw token is stored; the raw value is returned
    to the client once. A user may hold several active tokens (one per device).

    States: active -> consumed (rotated), active -> revoked, active -> expired.
    Only an active token can be rotated.

    Attributes:
        user_id: Owner of the token.
        token_hash: Hex SHA-256 of the raw token (unique).
        expires_at: Expiry moment (UTC).
        consumed_at: When the token was exchanged for a new one.
        revoked_at: When the token was revoked (logout, password change, reuse).
        replaced_by_id: Token issued in exchange for this one.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    consumed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    replaced_by_id: Mapped[UUID | None] = mapped_column(UUID7, nullable=True, default=None)

    @property
    def is_expired(self) -> bool:
        return utcnow() >= as_utc(self.expires_at)

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not (self.is_consumed or self.is_revoked or self.is_expired)
