"""
Модели SQLAlchemy для игровых сессий.

Основные компоненты:
    - Session: запланированная встреча стола
    - SessionIntent: намерение игрока прийти на сессию
    - SessionCheckin: фактическая явка, записывается при завершении сессии
"""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tablekeeper.core.database import Base
from tablekeeper.shared.mixins import TimestampMixin, UUIDMixin


class SessionStatus(StrEnum):
    """Статус сессии. Completed и Cancelled - конечные."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_SESSION_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})


class IntentStatus(StrEnum):
    UNSURE = "unsure"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class Session(UUIDMixin, TimestampMixin, Base):
    """
    Игровая сессия стола.

    Attributes:
        table_id: Стол (ГМ стола управляет сессией)
        title: Название
        description: Описание
        scheduled_for: Дата и время начала (может быть не назначено)
        status: SessionStatus
    """

    __tablename__ = "sessions"

    table_id: Mapped[UUID] = mapped_column(
        ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_for: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), default=SessionStatus.SCHEDULED, nullable=False
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SESSION_STATUSES


class SessionIntent(UUIDMixin, TimestampMixin, Base):
    """
    Намерение участника прийти на сессию.

    Одно намерение на пару (user_id, session_id):
    uq_session_intents_user_id_session_id.
    """

    __tablename__ = "session_intents"
    __table_args__ = (UniqueConstraint("user_id", "session_id"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_id: Mapped[UUID] = mapped_column(
        ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), default=IntentStatus.UNSURE, nullable=False)


class SessionCheckin(UUIDMixin, TimestampMixin, Base):
    """Явка по намерению: не больше одной записи на SessionIntent."""

    __tablename__ = "session_checkins"

    session_intent_id: Mapped[UUID] = mapped_column(
        ForeignKey("session_intents.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    attendance: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
