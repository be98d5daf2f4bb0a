"""
Хранилище refresh токенов.

Ротация выполняется одним условным UPDATE: токен помечается
использованным только если он сейчас активен. Из двух одновременных
ротаций одного токена успешна ровно одна, вторая получает
RefreshTokenAlreadyUsedError.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tablekeeper.core.config import JWTConfig
from tablekeeper.core.database import DatabaseManager
from tablekeeper.core.exceptions import (
    RefreshTokenAlreadyUsedError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenRevokedError,
)
from tablekeeper.shared.errors import safe
from tablekeeper.shared.logging import log_refresh_reuse_detected, log_refresh_rotated
from tablekeeper.shared.mixins import utcnow

from .models import RefreshToken

TOKEN_BYTES = 48


@dataclass(frozen=True)
class RotationResult:
    user_id: UUID
    refresh_token: str


class RefreshTokenStore:
    """
    Выпуск, ротация и отзыв refresh токенов.

    Работает в сессии запроса; изменения фиксируются вместе с транзакцией
    запроса. Исключение - обнаружение повторного использования: отзыв
    всех токенов пользователя фиксируется сразу, иначе откат запроса
    отменил бы его.
    """

    def __init__(self, session: AsyncSession, config: JWTConfig) -> None:
        self._session = session
        self._ttl = timedelta(days=config.refresh_token_expire_days)
        self._revoke_all_on_reuse = config.revoke_all_on_reuse

    @staticmethod
    def hash_token(raw: str) -> str:
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    async def _create(self, user_id: UUID) -> tuple[str, RefreshToken]:
        raw = secrets.token_urlsafe(TOKEN_BYTES)
        token = RefreshToken(
            user_id=user_id,
            token_hash=self.hash_token(raw),
            expires_at=utcnow() + self._ttl,
        )
        self._session.add(token)
        await self._session.flush()
        return raw, token

    @safe
    async def issue(self, user_id: UUID) -> str:
        """
        Выпустить новый refresh токен.

        Returns:
            Сырой токен (в БД хранится только его хеш).
        """
        raw, _ = await self._create(user_id)
        return raw

    @safe
    async def rotate(self, raw: str) -> RotationResult:
        """
        Обменять активный токен на новый.

        Raises:
            RefreshTokenNotFoundError: Токен неизвестен.
            RefreshTokenAlreadyUsedError: Токен уже был обменян.
            RefreshTokenRevokedError: Токен отозван.
            RefreshTokenExpiredError: Срок действия истёк.
        """
        now = utcnow()
        token_hash = self.hash_token(raw)

        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.consumed_at.is_(None),
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(consumed_at=now, updated_at=now)
            .returning(RefreshToken.id, RefreshToken.user_id)
            .execution_options(synchronize_session=False)
        )
        row = (await self._session.execute(stmt)).first()

        if row is None:
            await self._raise_rotation_failure(token_hash)

        old_id, user_id = row  # type: ignore[misc]
        new_raw, new_token = await self._create(user_id)

        await self._session.execute(
            update(RefreshToken)
            .where(RefreshToken.id == old_id)
            .values(replaced_by_id=new_token.id)
            .execution_options(synchronize_session=False)
        )

        log_refresh_rotated(str(user_id))
        return RotationResult(user_id=user_id, refresh_token=new_raw)

    async def _raise_rotation_failure(self, token_hash: str) -> None:
        result = await self._session.execute(
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        token = result.scalar_one_or_none()

        if token is None:
            raise RefreshTokenNotFoundError()

        if token.is_consumed:
            if self._revoke_all_on_reuse:
                revoked = await self._revoke_all(token.user_id)
                await self._session.commit()
                log_refresh_reuse_detected(str(token.user_id), revoked)
            raise RefreshTokenAlreadyUsedError()

        if token.is_revoked:
            raise RefreshTokenRevokedError()

        raise RefreshTokenExpiredError()

    async def _revoke_all(self, user_id: UUID) -> int:
        now = utcnow()
        result = await self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.consumed_at.is_(None),
                RefreshToken.revoked_at.is_(None),
            )
            .values(revoked_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @safe
    async def revoke(self, raw: str) -> bool:
        """Отозвать один токен. Повторный отзыв ничего не меняет."""
        now = utcnow()
        result = await self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == self.hash_token(raw),
                RefreshToken.revoked_at.is_(None),
            )
            .values(revoked_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    @safe
    async def revoke_all(self, user_id: UUID) -> int:
        """
        Отозвать все неиспользованные токены пользователя.

        Returns:
            Количество отозванных токенов.
        """
        return await self._revoke_all(user_id)

    @safe
    async def purge_expired(self) -> int:
        """Удалить токены с истёкшим сроком действия."""
        result = await self._session.execute(
            delete(RefreshToken)
            .where(RefreshToken.expires_at <= utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


async def purge_expired_tokens(manager: DatabaseManager, config: JWTConfig) -> int:
    """Удалить истёкшие refresh токены в отдельной транзакции (обслуживание БД)."""
    async with manager.session() as session:
        return await RefreshTokenStore(session, config).purge_expired()
