"""
Pydantic схемы для пользователей.
"""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from tablekeeper.shared.schemas import BaseSchema


class UserResponse(BaseSchema):
    """Публичное представление пользователя (без хеша пароля)."""

    id: UUID
    username: str
    email: str
    display_name: str | None = None
    role: str
    joined_at: datetime = Field(validation_alias="created_at")


class PublicUserResponse(BaseSchema):
    """Пользователь глазами других участников (без email)."""

    id: UUID
    username: str
    display_name: str | None = None


class UserUpdate(BaseSchema):
    """
    Частичное обновление профиля.

    Не переданное поле не меняется; ``display_name: null`` очищает имя.
    """

    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None
    display_name: str | None = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.lower() if value else value

    @field_validator("username", "email")
    @classmethod
    def not_null(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Field cannot be null")
        return value
