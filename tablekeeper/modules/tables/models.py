"""
Модели SQLAlchemy для игровых столов.

Основные компоненты:
    - Table: стол, которым управляет один ГМ
    - TableMembership: участие игрока в столе
"""

from enum import StrEnum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tablekeeper.core.database import Base
from tablekeeper.shared.mixins import TimestampMixin, UUIDMixin


class TableStatus(StrEnum):
    """Статус стола. Заявки принимаются только в active."""

    ACTIVE = "active"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class Table(UUIDMixin, TimestampMixin, Base):
    """
    Игровой стол.

    Attributes:
        gm_id: Владелец стола (ГМ); только он меняет стол, заявки и сессии
        title: Название
        description: Описание
        player_slots: Число мест для игроков (>= 1)
        status: TableStatus
    """

    __tablename__ = "tables"
    __table_args__ = (CheckConstraint("player_slots >= 1", name="player_slots_positive"),)

    gm_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    player_slots: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=TableStatus.ACTIVE, nullable=False)


class TableMembership(UUIDMixin, TimestampMixin, Base):
    """
    Участие пользователя в столе.

    Создаётся только при одобрении заявки. Пара (table_id, user_id)
    уникальна: uq_table_members_table_id_user_id.
    """

    __tablename__ = "table_members"
    __table_args__ = (UniqueConstraint("table_id", "user_id"),)

    table_id: Mapped[UUID] = mapped_column(
        ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
