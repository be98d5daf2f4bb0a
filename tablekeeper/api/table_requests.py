"""FastAPI роутер для заявок на вступление в стол."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status

from tablekeeper.core.dependencies import CurrentUserId, DatabaseSession, Gate
from tablekeeper.modules.table_requests.models import TableRequestStatus
from tablekeeper.modules.table_requests.repository import TableRequestRepository
from tablekeeper.modules.table_requests.schemas import TableRequestCreate, TableRequestResponse
from tablekeeper.modules.table_requests.service import TableRequestService
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository

router = APIRouter(tags=["Заявки"])

RequestId = Annotated[UUID, Path(description="Уникальный идентификатор заявки")]
StatusFilter = Annotated[
    TableRequestStatus | None,
    Query(alias="status", description="Фильтр по статусу заявки"),
]


def get_table_request_service(session: DatabaseSession, gate: Gate) -> TableRequestService:
    return TableRequestService(
        TableRequestRepository(session),
        TableRepository(session),
        MembershipRepository(session),
        gate,
    )


TableRequestServiceDep = Annotated[TableRequestService, Depends(get_table_request_service)]


@router.post(
    "/tables/{table_id}/requests",
    response_model=TableRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Подать заявку в стол",
    responses={
        404: {"description": "Стол не найден"},
        422: {
            "description": (
                "ГМ или участник не может подать заявку, стол закрыт "
                "или уже есть ожидающая заявка"
            )
        },
    },
)
async def create_request(
    table_id: Annotated[UUID, Path(description="Уникальный идентификатор стола")],
    data: TableRequestCreate,
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
) -> TableRequestResponse:
    """Подать заявку на вступление в стол.

    Args:
        table_id: Стол
        data: Сообщение для ГМ
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис заявок

    Returns:
        TableRequestResponse: Созданная заявка в статусе pending

    """
    request = await service.create(user_id, table_id, data.message)
    return TableRequestResponse.model_validate(request)


@router.get(
    "/tables/{table_id}/requests",
    response_model=list[TableRequestResponse],
    summary="Заявки в стол",
    responses={403: {"description": "Вызывающий не ГМ стола"}},
)
async def list_table_requests(
    table_id: Annotated[UUID, Path(description="Уникальный идентификатор стола")],
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
    request_status: StatusFilter = None,
) -> list[TableRequestResponse]:
    requests = await service.list_for_table(user_id, table_id, request_status)
    return [TableRequestResponse.model_validate(r) for r in requests]


@router.get(
    "/table-requests/mine",
    response_model=list[TableRequestResponse],
    summary="Мои заявки",
)
async def list_my_requests(
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
    request_status: StatusFilter = None,
) -> list[TableRequestResponse]:
    requests = await service.list_mine(user_id, request_status)
    return [TableRequestResponse.model_validate(r) for r in requests]


@router.post(
    "/table-requests/{request_id}/accept",
    response_model=TableRequestResponse,
    summary="Одобрить заявку",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        404: {"description": "Заявка не найдена"},
        422: {"description": "Заявка уже обработана, стол закрыт или заполнен"},
    },
)
async def accept_request(
    request_id: RequestId,
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
) -> TableRequestResponse:
    """Одобрить заявку: автор становится участником стола."""
    return TableRequestResponse.model_validate(await service.accept(user_id, request_id))


@router.post(
    "/table-requests/{request_id}/reject",
    response_model=TableRequestResponse,
    summary="Отклонить заявку",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        422: {"description": "Заявка уже обработана"},
    },
)
async def reject_request(
    request_id: RequestId,
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
) -> TableRequestResponse:
    return TableRequestResponse.model_validate(await service.reject(user_id, request_id))


@router.delete(
    "/table-requests/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Отозвать заявку",
    responses={
        403: {"description": "Заявка принадлежит другому пользователю"},
        422: {"description": "Заявка уже обработана"},
    },
)
async def withdraw_request(
    request_id: RequestId,
    user_id: CurrentUserId,
    service: TableRequestServiceDep,
) -> None:
    await service.withdraw(user_id, request_id)
