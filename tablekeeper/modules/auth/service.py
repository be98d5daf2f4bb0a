"""
Сервис аутентификации пользователей.

Регистрация, вход, обновление и отзыв токенов, смена пароля и
удаление аккаунта.

Основные компоненты:
    - AuthService: бизнес-логика аутентификации
    - AuthenticatedUser: пользователь вместе с выданной парой токенов
"""

from dataclasses import dataclass
from uuid import UUID

from tablekeeper.core.exceptions import (
    IncorrectPasswordError,
    InvalidCredentialsError,
    UnauthenticatedError,
)
from tablekeeper.core.metrics import record_auth_attempt, record_token_operation
from tablekeeper.core.security import PasswordHasher, TokenIssuer, TokenPair
from tablekeeper.modules.users.models import User
from tablekeeper.modules.users.repository import UserRepository
from tablekeeper.shared.logging import (
    log_login_failed,
    log_login_succeeded,
    log_logout,
    log_user_registered,
)

from .schemas import LoginRequest, RegisterRequest
from .store import RefreshTokenStore


@dataclass(frozen=True)
class AuthenticatedUser:
    user: User
    tokens: TokenPair


class AuthService:
    """
    Сервис аутентификации.

    Access токены - JWT без состояния; refresh токены хранятся
    в БД (только хеш) и одноразовые.
    """

    def __init__(
        self,
        users: UserRepository,
        tokens: RefreshTokenStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._hasher = hasher
        self._issuer = issuer

    async def register(self, request: RegisterRequest) -> User:
        """
        Зарегистрировать пользователя.

        Уникальность username и email заранее не проверяется: вставку
        отклоняет БД, а нарушение переводится в
        UsernameAlreadyTakenError / EmailAlreadyTakenError.

        Raises:
            WeakPasswordError: Пароль не соответствует политике.
        """
        hashed = await self._hasher.hash(request.password)
        user = await self._users.add(
            User(
                username=request.username,
                email=request.email,
                hashed_password=hashed,
                display_name=request.display_name,
            )
        )
        log_user_registered(str(user.id), user.username)
        return user

    async def issue_tokens(self, user_id: UUID) -> TokenPair:
        """Выдать access токен и новый refresh токен."""
        refresh_token = await self._tokens.issue(user_id)
        record_token_operation("issue")
        return TokenPair(
            token=self._issuer.issue(user_id),
            refresh_token=refresh_token,
            expires_in=self._issuer.expires_in,
        )

    async def login(self, request: LoginRequest) -> AuthenticatedUser:
        """
        Войти по email и паролю.

        Неизвестный email и неверный пароль дают одинаковую ошибку;
        для неизвестного email выполняется фиктивная проверка пароля,
        чтобы время ответа не выдавало наличие аккаунта.

        Raises:
            InvalidCredentialsError: Неверный email или пароль.
        """
        user = await self._users.get_by_email(request.email)

        if user is None:
            await self._hasher.verify_dummy(request.password)
            record_auth_attempt("failure")
            log_login_failed("unknown_email")
            raise InvalidCredentialsError()

        if not await self._hasher.verify(request.password, user.hashed_password):
            record_auth_attempt("failure")
            log_login_failed("wrong_password")
            raise InvalidCredentialsError()

        if self._hasher.needs_rehash(user.hashed_password):
            # Пароль уже проверен и удовлетворял политике при установке
            user.hashed_password = await self._hasher.rehash(request.password)
            await self._users.save(user)

        record_auth_attempt("success")
        log_login_succeeded(str(user.id))
        return AuthenticatedUser(user=user, tokens=await self.issue_tokens(user.id))

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Обменять refresh токен на новую пару токенов.

        Raises:
            RefreshTokenNotFoundError, RefreshTokenAlreadyUsedError,
            RefreshTokenRevokedError, RefreshTokenExpiredError
        """
        try:
            rotation = await self._tokens.rotate(refresh_token)
        except Exception:
            record_token_operation("rotate", "failure")
            raise
        record_token_operation("rotate")
        return TokenPair(
            token=self._issuer.issue(rotation.user_id),
            refresh_token=rotation.refresh_token,
            expires_in=self._issuer.expires_in,
        )

    async def logout(self, user_id: UUID) -> int:
        """
        Отозвать все refresh токены пользователя.

        Выданные access токены остаются валидными до истечения срока.

        Returns:
            Количество отозванных токенов.
        """
        revoked = await self._tokens.revoke_all(user_id)
        record_token_operation("revoke_all")
        log_logout(str(user_id), revoked)
        return revoked

    async def me(self, user_id: UUID) -> User:
        """
        Текущий пользователь по claim sub.

        Raises:
            UnauthenticatedError: Пользователь удалён после выдачи токена.
        """
        user = await self._users.get(user_id)
        if user is None:
            raise UnauthenticatedError("User no longer exists")
        return user

    async def _require_password(self, user: User, password: str) -> None:
        if not await self._hasher.verify(password, user.hashed_password):
            raise IncorrectPasswordError()

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> int:
        """
        Сменить пароль и отозвать все refresh токены.

        Raises:
            IncorrectPasswordError: Текущий пароль неверен.
            WeakPasswordError: Новый пароль не соответствует политике.

        Returns:
            Количество отозванных refresh токенов.
        """
        user = await self.me(user_id)
        await self._require_password(user, current_password)

        user.hashed_password = await self._hasher.hash(new_password)
        await self._users.save(user)
        return await self._tokens.revoke_all(user_id)

    async def delete_account(self, user_id: UUID, password: str) -> None:
        """
        Удалить аккаунт после проверки пароля.

        Токены, членства, заявки и намерения удаляются каскадно.

        Raises:
            IncorrectPasswordError: Пароль неверен.
        """
        user = await self.me(user_id)
        await self._require_password(user, password)
        await self._users.delete(user_id)
