"""Base repository with async CRUD operations.

Every method is wrapped with ``@safe``: storage errors leave the
repository already translated into domain errors.
"""

import uuid
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import safe

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    """Repository over a single SQLAlchemy model.

    Example:
        class UserRepository(BaseRepository[User]):
            model = User

        repo = UserRepository(session)
        user = await repo.get(user_id)
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    @safe
    async def get(self, entity_id: uuid.UUID, *, for_update: bool = False) -> ModelT | None:
        """Get a record by primary key.

        Args:
            entity_id: Primary key value.
            for_update: Lock the row until the end of the transaction
                (ignored by backends without row locks).
        """
        stmt = select(self.model).where(self.model.id == entity_id)  # type: ignore[attr-defined]
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @safe
    async def add(self, instance: ModelT) -> ModelT:
        """Insert a record and flush, so constraint violations surface here."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    @safe
    async def save(self, instance: ModelT) -> ModelT:
        """Flush pending changes of an already loaded record."""
        await self._session.flush()
        return instance

    @safe
    async def delete(self, entity_id: uuid.UUID) -> bool:
        """Delete a record by primary key (database-level cascades apply)."""
        stmt = delete(self.model).where(self.model.id == entity_id)  # type: ignore[attr-defined]
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    @safe
    async def paginate(
        self, stmt: Select[Any], *, offset: int, limit: int
    ) -> tuple[Sequence[ModelT], int]:
        """Run a select with offset/limit and return (items, total)."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self._session.execute(count_stmt)).scalar_one()
        result = await self._session.execute(stmt.offset(offset).limit(limit))
        return result.scalars().all(), total
