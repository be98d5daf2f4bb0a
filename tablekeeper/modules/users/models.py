"""
Модели SQLAlchemy для пользователей.
"""

from enum import StrEnum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from tablekeeper.core.database import Base
from tablekeeper.shared.mixins import TimestampMixin, UUIDMixin


class UserRole(StrEnum):
    """Роль для отображения (правами не управляет)."""

    PLAYER = "player"
    ADMIN = "admin"


class User(UUIDMixin, TimestampMixin, Base):
    """
    Модель пользователя.

    Attributes:
        id: Уникальный идентификатор (UUID7)
        username: Имя пользователя (уникальное, uq_users_username)
        email: Email для входа (уникальный, uq_users_email)
        hashed_password: PHC-строка Argon2id
        display_name: Отображаемое имя
        role: Роль для отображения
        created_at: Дата регистрации (из TimestampMixin)
        updated_at: Дата обновления (из TimestampMixin)
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.PLAYER, nullable=False)
