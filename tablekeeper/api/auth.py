"""FastAPI роутер для эндпоинтов аутентификации."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from tablekeeper.core.dependencies import (
    AppSettings,
    CurrentUserId,
    DatabaseSession,
    Hasher,
    Issuer,
)
from tablekeeper.modules.auth.schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from tablekeeper.modules.auth.service import AuthService
from tablekeeper.modules.auth.store import RefreshTokenStore
from tablekeeper.modules.users.repository import UserRepository
from tablekeeper.modules.users.schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["Аутентификация"])


def get_auth_service(
    session: DatabaseSession,
    hasher: Hasher,
    issuer: Issuer,
    settings: AppSettings,
) -> AuthService:
    """Получить экземпляр сервиса аутентификации.

    Args:
        session: Асинхронная сессия базы данных (одна транзакция на запрос)
        hasher: Хешер паролей приложения
        issuer: Выпуск и проверка access токенов
        settings: Настройки (срок жизни refresh токенов)

    Returns:
        AuthService: Экземпляр сервиса аутентификации

    """
    return AuthService(
        users=UserRepository(session),
        tokens=RefreshTokenStore(session, settings.jwt),
        hasher=hasher,
        issuer=issuer,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация нового пользователя",
    responses={
        400: {"description": "Некорректные данные или слабый пароль"},
        409: {"description": "Username или email уже заняты"},
    },
)
async def register(request: RegisterRequest, service: AuthServiceDep) -> LoginResponse:
    """Зарегистрировать пользователя и сразу выдать токены.

    Args:
        request: Username, email, пароль и отображаемое имя
        service: Сервис аутентификации

    Returns:
        LoginResponse: Пользователь, access и refresh токены

    """
    user = await service.register(request)
    tokens = await service.issue_tokens(user.id)
    return LoginResponse(user=UserResponse.model_validate(user), **tokens.model_dump())


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Вход в систему",
    responses={401: {"description": "Неверный email или пароль"}},
)
async def login(request: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    """Аутентифицировать пользователя по email и паролю.

    Неизвестный email и неверный пароль неразличимы для клиента.
    """
    result = await service.login(request)
    return LoginResponse(user=UserResponse.model_validate(result.user), **result.tokens.model_dump())


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Обновление токенов",
    responses={401: {"description": "Refresh токен не найден, использован, отозван или истёк"}},
)
async def refresh_token(request: RefreshRequest, service: AuthServiceDep) -> TokenResponse:
    """Обменять refresh токен на новую пару токенов.

    Refresh токен одноразовый: повторное предъявление отзывает все
    токены пользователя.
    """
    tokens = await service.refresh(request.refresh_token)
    return TokenResponse(**tokens.model_dump())


@router.get("/me", response_model=UserResponse, summary="Текущий пользователь")
async def me(user_id: CurrentUserId, service: AuthServiceDep) -> UserResponse:
    return UserResponse.model_validate(await service.me(user_id))


@router.post("/logout", response_model=LogoutResponse, summary="Выход из системы")
async def logout(user_id: CurrentUserId, service: AuthServiceDep) -> LogoutResponse:
    """Отозвать все refresh токены пользователя.

    Access токен остаётся действительным до истечения срока.
    """
    return LogoutResponse(revoked=await service.logout(user_id))


@router.put(
    "/password",
    response_model=LogoutResponse,
    summary="Смена пароля",
    responses={
        400: {"description": "Новый пароль не соответствует политике"},
        403: {"description": "Текущий пароль неверен"},
    },
)
async def change_password(
    request: ChangePasswordRequest,
    user_id: CurrentUserId,
    service: AuthServiceDep,
) -> LogoutResponse:
    """Сменить пароль; все refresh токены пользователя отзываются."""
    revoked = await service.change_password(
        user_id, request.current_password, request.new_password
    )
    return LogoutResponse(revoked=revoked)


@router.delete(
    "/account",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Удаление аккаунта",
    responses={403: {"description": "Пароль неверен"}},
)
async def delete_account(
    request: DeleteAccountRequest,
    user_id: CurrentUserId,
    service: AuthServiceDep,
) -> None:
    await service.delete_account(user_id, request.password)
