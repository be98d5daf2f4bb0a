"""
Сервис пользователей.

Основные компоненты:
    - UserService: чтение и обновление профиля
"""

import logging
from uuid import UUID

from tablekeeper.core.exceptions import UserNotFoundError
from tablekeeper.shared.update import apply_changes, changes_from

from .models import User
from .repository import UserRepository
from .schemas import UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Операции над профилем пользователя."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def get(self, user_id: UUID) -> User:
        """
        Raises:
            UserNotFoundError: Пользователь не найден.
        """
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(details={"resource_id": str(user_id)})
        return user

    async def update_profile(self, user_id: UUID, data: UserUpdate) -> User:
        """
        Частично обновить профиль.

        Уникальность нового username/email проверяет БД
        (UsernameAlreadyTakenError / EmailAlreadyTakenError).
        """
        user = await self.get(user_id)
        changed = apply_changes(user, changes_from(data))
        if changed:
            await self._users.save(user)
            logger.info(f"User {user_id} updated fields: {', '.join(changed)}")
        return user
