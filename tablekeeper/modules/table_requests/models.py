"""
Модели SQLAlchemy для заявок на вступление в стол.
"""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from tablekeeper.core.database import Base
from tablekeeper.shared.mixins import TimestampMixin, UUIDMixin


class TableRequestStatus(StrEnum):
    """Статус заявки. Approved и Rejected - конечные."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_PENDING_ONLY = text("status = 'pending'")


class TableRequest(UUIDMixin, TimestampMixin, Base):
    """
    Заявка игрока на вступление в стол.

    Не больше одной pending-заявки на пару (user_id, table_id):
    частичный уникальный индекс uq_table_requests_pending_user_id_table_id.

    Attributes:
        user_id: Автор заявки
        table_id: Стол
        message: Сообщение ГМ
        status: TableRequestStatus
        decided_at: Момент одобрения/отклонения
    """

    __tablename__ = "table_requests"
    __table_args__ = (
        Index(
            "uq_table_requests_pending_user_id_table_id",
            "user_id",
            "table_id",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    table_id: Mapped[UUID] = mapped_column(
        ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=TableRequestStatus.PENDING, nullable=False
    )
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
