"""FastAPI роутер для эндпоинтов пользователей."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from tablekeeper.core.dependencies import CurrentUserId, DatabaseSession
from tablekeeper.modules.users.repository import UserRepository
from tablekeeper.modules.users.schemas import PublicUserResponse, UserResponse, UserUpdate
from tablekeeper.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["Пользователи"])


def get_user_service(session: DatabaseSession) -> UserService:
    return UserService(UserRepository(session))


UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Обновить свой профиль",
    responses={409: {"description": "Username или email уже заняты"}},
)
async def update_me(
    data: UserUpdate,
    user_id: CurrentUserId,
    service: UserServiceDep,
) -> UserResponse:
    """Частично обновить профиль текущего пользователя.

    Не переданные поля не меняются; ``display_name: null`` очищает имя.

    Args:
        data: Изменяемые поля
        user_id: Идентификатор аутентифицированного пользователя
        service: Сервис пользователей

    Returns:
        UserResponse: Обновлённый профиль

    """
    return UserResponse.model_validate(await service.update_profile(user_id, data))


@router.get(
    "/{user_id}",
    response_model=PublicUserResponse,
    summary="Публичный профиль пользователя",
    responses={404: {"description": "Пользователь не найден"}},
)
async def get_user(
    user_id: Annotated[UUID, Path(description="Уникальный идентификатор пользователя")],
    _: CurrentUserId,
    service: UserServiceDep,
) -> PublicUserResponse:
    return PublicUserResponse.model_validate(await service.get(user_id))
