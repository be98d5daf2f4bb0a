"""
Pydantic схемы для сессий, намерений и явки.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from tablekeeper.shared.schemas import BaseSchema, UUIDTimestampSchema

from .models import IntentStatus, SessionStatus


class SessionCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    scheduled_for: datetime | None = None


class SessionUpdate(BaseSchema):
    """
    Частичное обновление сессии.

    ``scheduled_for: null`` снимает дату, отсутствие поля её не меняет.
    Завершить сессию можно только через finalize.
    """

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    scheduled_for: datetime | None = None
    status: SessionStatus | None = None

    @field_validator("title", "status")
    @classmethod
    def not_null(cls, value: object) -> object:
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("status")
    @classmethod
    def not_completed(cls, value: SessionStatus) -> SessionStatus:
        if value == SessionStatus.COMPLETED:
            raise ValueError("Use finalize to complete a session")
        return value


class SessionResponse(UUIDTimestampSchema):
    table_id: UUID
    title: str
    description: str | None
    scheduled_for: datetime | None
    status: SessionStatus


class IntentDeclare(BaseSchema):
    status: IntentStatus = IntentStatus.CONFIRMED


class IntentUpdate(BaseSchema):
    status: IntentStatus


class IntentResponse(UUIDTimestampSchema):
    user_id: UUID
    session_id: UUID
    status: IntentStatus


class CheckinEntry(BaseSchema):
    """Явка одного участника."""

    user_id: UUID
    attendance: bool
    notes: str | None = Field(default=None, max_length=1000)


class SessionFinalize(BaseSchema):
    checkins: list[CheckinEntry] = Field(default_factory=list)


class CheckinResponse(UUIDTimestampSchema):
    session_intent_id: UUID
    attendance: bool
    notes: str | None


class FinalizeResponse(BaseSchema):
    session: SessionResponse
    checkins: list[CheckinResponse]
