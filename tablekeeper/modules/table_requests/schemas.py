"""
Pydantic схемы для заявок.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from tablekeeper.shared.schemas import BaseSchema, UUIDTimestampSchema

from .models import TableRequestStatus


class TableRequestCreate(BaseSchema):
    message: str | None = Field(default=None, max_length=1000)


class TableRequestResponse(UUIDTimestampSchema):
    user_id: UUID
    table_id: UUID
    message: str | None
    status: TableRequestStatus
    decided_at: datetime | None = None
