"""Доступ к данным пользователей."""

from sqlalchemy import select

from tablekeeper.shared.errors import safe
from tablekeeper.shared.repository import BaseRepository

from .models import User


class UserRepository(BaseRepository[User]):
    model = User

    @safe
    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()
