"""Доступ к данным столов и участников."""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, exists, func, or_, select

from tablekeeper.modules.users.models import User
from tablekeeper.shared.errors import safe
from tablekeeper.shared.repository import BaseRepository

from .models import Table, TableMembership


class TableRepository(BaseRepository[Table]):
    model = Table

    @safe
    async def search(
        self,
        *,
        status: str | None = None,
        gm_id: UUID | None = None,
        member_id: UUID | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Table], int]:
        """
        Список столов с фильтрами.

        Args:
            status: Только столы с этим статусом.
            gm_id: Только столы этого ГМ.
            member_id: Столы, где пользователь ГМ или участник.
        """
        stmt = select(Table)
        if status is not None:
            stmt = stmt.where(Table.status == status)
        if gm_id is not None:
            stmt = stmt.where(Table.gm_id == gm_id)
        if member_id is not None:
            is_member = exists().where(
                and_(TableMembership.table_id == Table.id, TableMembership.user_id == member_id)
            )
            stmt = stmt.where(or_(Table.gm_id == member_id, is_member))
        stmt = stmt.order_by(Table.created_at.desc(), Table.id.desc())
        return await self.paginate(stmt, offset=offset, limit=limit)


class MembershipRepository(BaseRepository[TableMembership]):
    model = TableMembership

    @safe
    async def get_for(self, table_id: UUID, user_id: UUID) -> TableMembership | None:
        result = await self._session.execute(
            select(TableMembership).where(
                TableMembership.table_id == table_id,
                TableMembership.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    @safe
    async def is_member(self, table_id: UUID, user_id: UUID) -> bool:
        stmt = select(
            exists().where(
                TableMembership.table_id == table_id,
                TableMembership.user_id == user_id,
            )
        )
        return bool((await self._session.execute(stmt)).scalar())

    @safe
    async def count(self, table_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TableMembership)
            .where(TableMembership.table_id == table_id)
        )
        return (await self._session.execute(stmt)).scalar_one()

    @safe
    async def list_with_users(self, table_id: UUID) -> list[dict[str, Any]]:
        """Участники стола вместе с данными пользователей (по дате вступления)."""
        stmt = (
            select(
                TableMembership.user_id,
                User.username,
                User.display_name,
                TableMembership.created_at.label("joined_at"),
            )
            .join(User, User.id == TableMembership.user_id)
            .where(TableMembership.table_id == table_id)
            .order_by(TableMembership.created_at, TableMembership.id)
        )
        result = await self._session.execute(stmt)
        return [dict(row._mapping) for row in result]

    @safe
    async def remove(self, table_id: UUID, user_id: UUID) -> bool:
        result = await self._session.execute(
            delete(TableMembership).where(
                TableMembership.table_id == table_id,
                TableMembership.user_id == user_id,
            )
        )
        return result.rowcount > 0
