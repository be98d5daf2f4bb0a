"""
Безопасность: хеширование паролей (Argon2id) и JWT access токены.
"""

import asyncio
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from functools import partial
from pathlib import Path
from typing import Any
from uuid import UUID

import jwt
from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from pydantic import BaseModel, ConfigDict, ValidationError

from .config import JWTConfig, PasswordConfig
from .exceptions import (
    InvalidHashFormatError,
    TokenExpiredError,
    TokenInvalidError,
    WeakPasswordError,
)

# ==================== Пароли ====================

# Встроенный список распространённых паролей, проходящих проверку по классам символов
COMMON_PASSWORDS: frozenset[str] = frozenset(
    {
        "password1",
        "password12",
        "password123",
        "password1234",
        "passw0rd",
        "p@ssw0rd",
        "qwerty123",
        "qwerty1234",
        "qwertyuiop1",
        "abc12345",
        "abcd1234",
        "welcome1",
        "welcome123",
        "letmein1",
        "iloveyou1",
        "admin123",
        "changeme1",
        "sunshine1",
        "football1",
        "baseball1",
        "monkey123",
        "dragon123",
        "trustno1",
        "master123",
        "1q2w3e4r",
        "1qaz2wsx",
        "zaq12wsx",
        "superman1",
        "princess1",
        "starwars1",
    }
)

_SPECIAL = re.compile(r"[^A-Za-z0-9]")


class PasswordHasher:
    """
    Хеширование и проверка паролей Argon2id.

    Argon2 нагружает CPU, поэтому вычисления выполняются в отдельном
    ограниченном пуле потоков, а не в event loop.
    """

    def __init__(self, config: PasswordConfig, executor: ThreadPoolExecutor | None = None) -> None:
        self._config = config
        self._hasher = Argon2Hasher(
            time_cost=config.time_cost,
            memory_cost=config.memory_cost,
            parallelism=config.parallelism,
            type=Type.ID,
        )
        self._executor = executor or ThreadPoolExecutor(
            max_workers=config.hash_workers,
            thread_name_prefix="argon2",
        )
        self._common_passwords = COMMON_PASSWORDS | self._load_common_passwords(
            config.common_passwords_file
        )
        # Считается при создании, вне пути запроса
        self._dummy_hash = self._hasher.hash("dummy-password-for-timing")

    @staticmethod
    def _load_common_passwords(path: str | None) -> frozenset[str]:
        if not path:
            return frozenset()
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        return frozenset(line.strip().lower() for line in lines if line.strip())

    async def _run(self, func: Any, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    def policy_violations(self, password: str) -> list[str]:
        """
        Проверить пароль по политике.

        Returns:
            Список нарушенных правил (пустой, если пароль допустим).
        """
        cfg = self._config
        violations: list[str] = []

        if len(password) < cfg.min_length:
            violations.append(f"Password must be at least {cfg.min_length} characters long")
        if len(password) > cfg.max_length:
            violations.append(f"Password must be at most {cfg.max_length} characters long")
        if cfg.require_uppercase and not any(c.isupper() for c in password):
            violations.append("Password must contain an uppercase letter")
        if cfg.require_lowercase and not any(c.islower() for c in password):
            violations.append("Password must contain a lowercase letter")
        if cfg.require_digit and not any(c.isdigit() for c in password):
            violations.append("Password must contain a digit")
        if cfg.require_special and not _SPECIAL.search(password):
            violations.append("Password must contain a special character")
        if password.lower() in self._common_passwords:
            violations.append("Password is too common")

        return violations

    def check_policy(self, password: str) -> None:
        """
        Raises:
            WeakPasswordError: Пароль не соответствует политике.
        """
        violations = self.policy_violations(password)
        if violations:
            raise WeakPasswordError(details={"errors": violations})

    async def hash(self, password: str) -> str:
        """
        Захешировать пароль.

        Args:
            password: Пароль в открытом виде.

        Returns:
            PHC-строка Argon2id (алгоритм, параметры, соль, хеш).

        Raises:
            WeakPasswordError: Пароль не соответствует политике.
        """
        self.check_policy(password)
        return await self._run(self._hasher.hash, password)

    async def rehash(self, password: str) -> str:
        """Перехешировать уже проверенный пароль с текущими параметрами (без проверки политики)."""
        return await self._run(self._hasher.hash, password)

    def _verify_sync(self, password: str, hashed: str) -> bool:
        try:
            return self._hasher.verify(hashed, password)
        except VerifyMismatchError:
            return False
        except InvalidHashError as e:
            raise InvalidHashFormatError() from e
        except VerificationError:
            return False

    async def verify(self, password: str, hashed: str) -> bool:
        """
        Проверить пароль.

        Неверный пароль - это False, а не исключение.

        Raises:
            InvalidHashFormatError: Хеш в БД повреждён.
        """
        return await self._run(self._verify_sync, password, hashed)

    async def verify_dummy(self, password: str) -> None:
        """Проверка против фиктивного хеша: выравнивает время ответа при неизвестном email."""
        await self._run(self._verify_sync, password, self._dummy_hash)

    def needs_rehash(self, hashed: str) -> bool:
        """Изменились ли параметры Argon2 с момента хеширования."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError as e:
            raise InvalidHashFormatError() from e

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


# ==================== JWT ====================


class Claims(BaseModel):
    """Проверенные claims access токена."""

    model_config = ConfigDict(frozen=True)

    sub: UUID
    iat: datetime
    exp: datetime


class TokenPair(BaseModel):
    """Пара access и refresh токенов."""

    token: str
    refresh_token: str
    expires_in: int  # секунды до истечения access токена


class TokenIssuer:
    """
    Выпуск и проверка JWT access токенов.

    Секрет передаётся явно через JWTConfig и нигде не логируется.
    """

    REQUIRED_CLAIMS = ("exp", "iat", "sub")

    def __init__(self, config: JWTConfig) -> None:
        secret = config.secret_key.get_secret_value()
        if not secret:
            raise ValueError("JWT secret key must not be empty")
        self._secret = secret
        self._algorithm = config.algorithm
        self._ttl = timedelta(minutes=config.access_token_expire_minutes)
        self._leeway = config.leeway_seconds

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={self._algorithm!r}, ttl={self._ttl})"

    @property
    def expires_in(self) -> int:
        """Время жизни токена в секундах."""
        return int(self._ttl.total_seconds())

    def issue(self, user_id: UUID, now: datetime | None = None) -> str:
        """
        Создать access токен.

        Args:
            user_id: ID пользователя (claim sub).
            now: Момент выпуска (для тестов).

        Returns:
            Подписанный JWT.
        """
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: str) -> Claims:
        """
        Проверить подпись и срок действия токена.

        Raises:
            TokenExpiredError: Токен истек.
            TokenInvalidError: Подпись, структура или claims невалидны.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": list(self.REQUIRED_CLAIMS)},
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError() from e

        try:
            return Claims(
                sub=payload["sub"],
                iat=datetime.fromtimestamp(payload["iat"], tz=UTC),
                exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            )
        except (ValidationError, TypeError, ValueError, OverflowError) as e:
            raise TokenInvalidError() from e
