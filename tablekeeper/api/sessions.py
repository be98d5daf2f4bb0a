"""FastAPI роутер для игровых сессий и намерений участников."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status

from tablekeeper.core.dependencies import CurrentUserId, DatabaseSession, Gate
from tablekeeper.modules.sessions.repository import (
    SessionCheckinRepository,
    SessionIntentRepository,
    SessionRepository,
)
from tablekeeper.modules.sessions.schemas import (
    CheckinResponse,
    FinalizeResponse,
    IntentDeclare,
    IntentResponse,
    IntentUpdate,
    SessionCreate,
    SessionFinalize,
    SessionResponse,
    SessionUpdate,
)
from tablekeeper.modules.sessions.service import SessionIntentService, SessionService
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository

router = APIRouter(tags=["Сессии"])

TableId = Annotated[UUID, Path(description="Уникальный идентификатор стола")]
SessionId = Annotated[UUID, Path(description="Уникальный идентификатор сессии")]


def get_session_service(session: DatabaseSession, gate: Gate) -> SessionService:
    return SessionService(
        SessionRepository(session),
        SessionIntentRepository(session),
        SessionCheckinRepository(session),
        TableRepository(session),
        MembershipRepository(session),
        gate,
    )


def get_intent_service(session: DatabaseSession, gate: Gate) -> SessionIntentService:
    return SessionIntentService(
        SessionIntentRepository(session),
        SessionRepository(session),
        TableRepository(session),
        MembershipRepository(session),
        gate,
    )


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
IntentServiceDep = Annotated[SessionIntentService, Depends(get_intent_service)]


# ==================== Sessions ====================


@router.post(
    "/tables/{table_id}/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Запланировать сессию",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        404: {"description": "Стол не найден"},
    },
)
async def schedule_session(
    table_id: TableId,
    data: SessionCreate,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> SessionResponse:
    """Запланировать сессию стола.

    Args:
        table_id: Стол
        data: Название, описание и время начала
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис сессий

    Returns:
        SessionResponse: Сессия в статусе scheduled

    """
    return SessionResponse.model_validate(await service.schedule(user_id, table_id, data))


@router.get(
    "/tables/{table_id}/sessions",
    response_model=list[SessionResponse],
    summary="Сессии стола",
    responses={403: {"description": "Вызывающий не ГМ и не участник"}},
)
async def list_sessions(
    table_id: TableId,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> list[SessionResponse]:
    sessions = await service.list_for_table(user_id, table_id)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.get("/sessions/{session_id}", response_model=SessionResponse, summary="Получить сессию")
async def get_session(
    session_id: SessionId,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> SessionResponse:
    return SessionResponse.model_validate(await service.get(user_id, session_id))


@router.patch(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Обновить сессию",
    responses={
        403: {"description": "Вызывающий не ГМ стола"},
        422: {"description": "Сессия завершена или отменена"},
    },
)
async def update_session(
    session_id: SessionId,
    data: SessionUpdate,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> SessionResponse:
    """Частично обновить сессию.

    ``scheduled_for: null`` снимает дату начала.
    """
    return SessionResponse.model_validate(await service.update(user_id, session_id, data))


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Удалить сессию",
    responses={403: {"description": "Вызывающий не ГМ стола"}},
)
async def delete_session(
    session_id: SessionId,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> None:
    await service.delete(user_id, session_id)


@router.post(
    "/sessions/{session_id}/finalize",
    response_model=FinalizeResponse,
    summary="Завершить сессию",
    responses={
        400: {"description": "Повторяющийся пользователь или не участник стола"},
        403: {"description": "Вызывающий не ГМ стола"},
        422: {"description": "Сессия уже завершена или отменена"},
    },
)
async def finalize_session(
    session_id: SessionId,
    data: SessionFinalize,
    user_id: CurrentUserId,
    service: SessionServiceDep,
) -> FinalizeResponse:
    """Завершить сессию и записать явку участников.

    Args:
        session_id: Сессия
        data: Явка по участникам
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис сессий

    Returns:
        FinalizeResponse: Завершённая сессия и записи явки

    """
    result = await service.finalize(user_id, session_id, data.checkins)
    return FinalizeResponse(
        session=SessionResponse.model_validate(result.session),
        checkins=[CheckinResponse.model_validate(c) for c in result.checkins],
    )


# ==================== Intents ====================


@router.post(
    "/sessions/{session_id}/intents",
    response_model=IntentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Заявить намерение",
    responses={
        403: {"description": "Вызывающий не участник стола"},
        409: {"description": "Намерение уже заявлено"},
        422: {"description": "Сессия не принимает намерения"},
    },
)
async def declare_intent(
    session_id: SessionId,
    data: IntentDeclare,
    user_id: CurrentUserId,
    service: IntentServiceDep,
) -> IntentResponse:
    return IntentResponse.model_validate(await service.declare(user_id, session_id, data.status))


@router.get(
    "/sessions/{session_id}/intents",
    response_model=list[IntentResponse],
    summary="Намерения участников",
)
async def list_intents(
    session_id: SessionId,
    user_id: CurrentUserId,
    service: IntentServiceDep,
) -> list[IntentResponse]:
    intents = await service.list_for_session(user_id, session_id)
    return [IntentResponse.model_validate(i) for i in intents]


@router.patch(
    "/intents/{intent_id}",
    response_model=IntentResponse,
    summary="Изменить намерение",
    responses={403: {"description": "Намерение принадлежит другому пользователю"}},
)
async def update_intent(
    intent_id: Annotated[UUID, Path(description="Уникальный идентификатор намерения")],
    data: IntentUpdate,
    user_id: CurrentUserId,
    service: IntentServiceDep,
) -> IntentResponse:
    return IntentResponse.model_validate(await service.update(user_id, intent_id, data.status))
