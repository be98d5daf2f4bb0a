"""FastAPI роутер для эндпоинтов игровых столов."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status

from tablekeeper.core.dependencies import CurrentUserId, DatabaseSession, Gate, Pagination
from tablekeeper.modules.tables.models import TableStatus
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository
from tablekeeper.modules.tables.schemas import (
    MemberResponse,
    TableCreate,
    TableResponse,
    TableUpdate,
)
from tablekeeper.modules.tables.service import TableService
from tablekeeper.shared.schemas import PaginatedResponse

router = APIRouter(prefix="/tables", tags=["Столы"])

TableId = Annotated[UUID, Path(description="Уникальный идентификатор стола")]


def get_table_service(session: DatabaseSession, gate: Gate) -> TableService:
    """Получить экземпляр сервиса столов.

    Args:
        session: Асинхронная сессия базы данных
        gate: Проверки прав

    Returns:
        TableService: Экземпляр сервиса столов

    """
    return TableService(TableRepository(session), MembershipRepository(session), gate)


TableServiceDep = Annotated[TableService, Depends(get_table_service)]


@router.post(
    "",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Создать стол",
    responses={
        201: {"description": "Стол создан, вызывающий - его ГМ"},
        401: {"description": "Не аутентифицирован"},
    },
)
async def create_table(
    data: TableCreate,
    user_id: CurrentUserId,
    service: TableServiceDep,
) -> TableResponse:
    """Создать игровой стол.

    Создатель становится ГМ стола и единственным, кто может его менять.

    Args:
        data: Название, описание и число мест
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис столов

    Returns:
        TableResponse: Созданный стол

    """
    return TableResponse.model_validate(await service.create(user_id, data))


@router.get(
    "",
    response_model=PaginatedResponse[TableResponse],
    summary="Список столов",
)
async def list_tables(
    user_id: CurrentUserId,
    service: TableServiceDep,
    pagination: Pagination,
    table_status: Annotated[
        TableStatus | None,
        Query(alias="status", description="Фильтр по статусу"),
    ] = None,
    gm_id: Annotated[UUID | None, Query(description="Фильтр по ГМ")] = None,
    mine: Annotated[
        bool,
        Query(description="Только столы, где пользователь ГМ или участник"),
    ] = False,
) -> PaginatedResponse[TableResponse]:
    """Получить постраничный список столов.

    Args:
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис столов
        pagination: Параметры пагинации
        table_status: Фильтр по статусу стола
        gm_id: Фильтр по ГМ
        mine: Только свои столы

    Returns:
        PaginatedResponse[TableResponse]: Постраничный список столов

    """
    tables, total = await service.search(
        pagination,
        status=table_status,
        gm_id=gm_id,
        member_id=user_id if mine else None,
    )
    items = [TableResponse.model_validate(table) for table in tables]
    return PaginatedResponse.create(items=items, total=total, params=pagination)


@router.get(
    "/{table_id}",
    response_model=TableResponse,
    summary="Получить стол",
    responses={404: {"description": "Стол не найден"}},
)
async def get_table(table_id: TableId, _: CurrentUserId, service: TableServiceDep) -> TableResponse:
    return TableResponse.model_validate(await service.get(table_id))


@router.patch(
    "/{table_id}",
    response_model=TableResponse,
    summary="Обновить стол",
    responses={
        400: {"description": "Мест меньше, чем участников"},
        403: {"description": "Вызывающий не ГМ стола"},
        404: {"description": "Стол не найден"},
    },
)
async def update_table(
    table_id: TableId,
    data: TableUpdate,
    user_id: CurrentUserId,
    service: TableServiceDep,
) -> TableResponse:
    """Частично обновить стол (только ГМ)."""
    return TableResponse.model_validate(await service.update(user_id, table_id, data))


@router.delete(
    "/{table_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Удалить стол",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        404: {"description": "Стол не найден"},
    },
)
async def delete_table(table_id: TableId, user_id: CurrentUserId, service: TableServiceDep) -> None:
    """Удалить стол вместе с участниками, заявками и сессиями."""
    await service.delete(user_id, table_id)


@router.get(
    "/{table_id}/members",
    response_model=list[MemberResponse],
    summary="Участники стола",
    responses={403: {"description": "Вызывающий не ГМ и не участник"}},
)
async def list_members(
    table_id: TableId,
    user_id: CurrentUserId,
    service: TableServiceDep,
) -> list[MemberResponse]:
    members = await service.list_members(user_id, table_id)
    return [MemberResponse.model_validate(member) for member in members]


@router.delete(
    "/{table_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Исключить участника",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        404: {"description": "Пользователь не участник стола"},
    },
)
async def remove_member(
    table_id: TableId,
    member_id: Annotated[UUID, Path(description="Идентификатор участника")],
    user_id: CurrentUserId,
    service: TableServiceDep,
) -> None:
    await service.remove_member(user_id, table_id, member_id)


@router.post(
    "/{table_id}/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Покинуть стол",
    responses={
        403: {"description": "Вызывающий не участник"},
        422: {"description": "ГМ не может покинуть свой стол"},
    },
)
async def leave_table(table_id: TableId, user_id: CurrentUserId, service: TableServiceDep) -> None:
    await service.leave(user_id, table_id)
