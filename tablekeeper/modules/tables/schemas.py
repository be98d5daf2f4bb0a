"""
Pydantic схемы для столов.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from tablekeeper.shared.schemas import BaseSchema, UUIDTimestampSchema

from .models import TableStatus


class TableCreate(BaseSchema):
    """Создание стола; создатель становится ГМ."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    player_slots: int = Field(default=4, ge=1, le=100)


class TableUpdate(BaseSchema):
    """
    Частичное обновление стола.

    Поле ``description`` можно очистить, передав ``null``.
    """

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    player_slots: int | None = Field(default=None, ge=1, le=100)
    status: TableStatus | None = None

    @field_validator("title", "player_slots", "status")
    @classmethod
    def not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class TableResponse(UUIDTimestampSchema):
    gm_id: UUID
    title: str
    description: str | None
    player_slots: int
    status: TableStatus


class MemberResponse(BaseSchema):
    """Участник стола."""

    user_id: UUID
    username: str
    display_name: str | None = None
    joined_at: datetime
