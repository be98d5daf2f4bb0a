"""Базовые схемы Pydantic для обработки API запросов и ответов."""

import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Базовая схема с общей конфигурацией.

    Все схемы должны наследоваться от этого базового класса
    для обеспечения единообразного поведения в приложении.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )


class UUIDTimestampSchema(BaseSchema):
    """Схема с UUID-идентификатором и временными метками."""

    id: uuid.UUID = Field(..., description="Уникальный идентификатор")
    created_at: datetime = Field(..., description="Дата и время создания")
    updated_at: datetime = Field(..., description="Дата и время последнего обновления")


class PaginationParams(BaseSchema):
    """Параметры пагинации для списочных эндпоинтов."""

    page: int = Field(default=1, ge=1, description="Номер страницы (начиная с 1)")
    page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Количество элементов на странице",
    )

    @property
    def offset(self) -> int:
        """Смещение для запросов к базе данных."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Лимит для запросов к базе данных."""
        return self.page_size


T = TypeVar("T")


class PaginatedResponse(BaseSchema, Generic[T]):
    """Обобщенная обертка для пагинированных ответов."""

    items: list[T] = Field(..., description="Список элементов")
    total: int = Field(..., ge=0, description="Общее количество элементов")
    page: int = Field(..., ge=1, description="Текущий номер страницы")
    page_size: int = Field(..., ge=1, description="Количество элементов на странице")

    @classmethod
    def create(
        cls,
        items: list[T],
        total: int,
        params: PaginationParams,
    ) -> "PaginatedResponse[T]":
        """Создает пагинированный ответ из элементов и параметров пагинации."""
        return cls(
            items=items,
            total=total,
            page=params.page,
            page_size=params.page_size,
        )


class MessageResponse(BaseSchema):
    """Простой ответ с сообщением."""

    message: str


class HealthResponse(BaseSchema):
    """Ответ health check."""

    status: str
    version: str
    dependencies: dict[str, str] = Field(default_factory=dict)
