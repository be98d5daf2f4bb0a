"""Схемы Pydantic для эндпоинтов аутентификации."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from tablekeeper.modules.users.schemas import UserResponse


class RegisterRequest(BaseModel):
    """Схема запроса на регистрацию пользователя."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Уникальное имя пользователя",
        examples=["alice"],
    )
    email: EmailStr = Field(
        ...,
        description="Email пользователя для входа в систему",
        examples=["alice@example.com"],
    )
    # Длину и состав проверяет политика паролей (WeakPasswordError с перечнем нарушений)
    password: str = Field(..., description="Пароль пользователя")
    display_name: str | None = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Username must be at least 3 characters long")
        return value


class LoginRequest(BaseModel):
    """Схема запроса на вход в систему."""

    email: EmailStr = Field(..., examples=["alice@example.com"])
    password: str = Field(..., min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class RefreshRequest(BaseModel):
    """Схема запроса на обновление токена."""

    refresh_token: str = Field(..., min_length=1, max_length=512)


class ChangePasswordRequest(BaseModel):
    """Смена пароля: нужен текущий пароль."""

    current_password: str = Field(..., min_length=1, max_length=1024)
    new_password: str


class DeleteAccountRequest(BaseModel):
    """Удаление аккаунта с подтверждением паролем."""

    password: str = Field(..., min_length=1, max_length=1024)


class TokenResponse(BaseModel):
    """Схема ответа с токенами (обновление токена)."""

    token: str = Field(..., description="JWT токен доступа")
    refresh_token: str = Field(..., description="Одноразовый токен обновления")
    expires_in: int = Field(..., description="Время жизни токена доступа в секундах")


class LoginResponse(TokenResponse):
    """Ответ на вход и регистрацию: пользователь и токены."""

    user: UserResponse


class LogoutResponse(BaseModel):
    revoked: int = Field(..., description="Количество отозванных refresh токенов")
