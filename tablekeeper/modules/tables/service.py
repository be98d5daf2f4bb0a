"""
Сервис игровых столов.

Основные компоненты:
    - TableService: создание и изменение столов, управление участниками
"""

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from tablekeeper.core.authorization import AuthorizationGate, TableAccess
from tablekeeper.core.exceptions import (
    GameMasterCannotLeaveError,
    MembershipNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from tablekeeper.shared.schemas import PaginationParams
from tablekeeper.shared.update import Change, apply_changes, changes_from

from .models import Table
from .repository import MembershipRepository, TableRepository
from .schemas import TableCreate, TableUpdate

logger = logging.getLogger(__name__)


class TableService:
    """Команды над столами. Все изменения - только для ГМ стола."""

    def __init__(
        self,
        tables: TableRepository,
        members: MembershipRepository,
        gate: AuthorizationGate,
    ) -> None:
        self._tables = tables
        self._members = members
        self._gate = gate

    async def access(self, table_id: UUID, caller_id: UUID, *, for_update: bool = False) -> TableAccess:
        """
        Загрузить снимок отношения вызывающего к столу.

        Raises:
            TableNotFoundError: Стол не найден.
        """
        table = await self._tables.get(table_id, for_update=for_update)
        if table is None:
            raise TableNotFoundError(details={"resource_id": str(table_id)})
        return TableAccess(
            table=table,
            caller_id=caller_id,
            is_member=await self._members.is_member(table_id, caller_id),
        )

    async def create(self, caller_id: UUID, data: TableCreate) -> Table:
        table = await self._tables.add(
            Table(
                gm_id=caller_id,
                title=data.title,
                description=data.description,
                player_slots=data.player_slots,
            )
        )
        logger.info(f"Table {table.id} created by {caller_id}")
        return table

    async def get(self, table_id: UUID) -> Table:
        table = await self._tables.get(table_id)
        if table is None:
            raise TableNotFoundError(details={"resource_id": str(table_id)})
        return table

    async def search(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        gm_id: UUID | None = None,
        member_id: UUID | None = None,
    ) -> tuple[Sequence[Table], int]:
        return await self._tables.search(
            status=status,
            gm_id=gm_id,
            member_id=member_id,
            offset=pagination.offset,
            limit=pagination.limit,
        )

    async def update(self, caller_id: UUID, table_id: UUID, data: TableUpdate) -> Table:
        """
        Обновить стол (только ГМ).

        Raises:
            ForbiddenError: Вызывающий не ГМ.
            ValidationError: Мест меньше, чем уже принятых игроков.
        """
        access = await self.access(table_id, caller_id, for_update=True)
        self._gate.require_owner(access)

        changes = changes_from(data)
        slots = changes.get("player_slots")
        if isinstance(slots, Change):
            members = await self._members.count(table_id)
            if slots.value < members:
                raise ValidationError(
                    message="player_slots cannot be lower than the number of members",
                    details={"field": "player_slots", "current": members},
                )

        table = access.table
        if apply_changes(table, changes):
            await self._tables.save(table)
        return table  # type: ignore[return-value]

    async def delete(self, caller_id: UUID, table_id: UUID) -> None:
        access = await self.access(table_id, caller_id, for_update=True)
        self._gate.require_owner(access)
        await self._tables.delete(table_id)
        logger.info(f"Table {table_id} deleted by {caller_id}")

    async def list_members(self, caller_id: UUID, table_id: UUID) -> list[dict[str, Any]]:
        """Участники стола (видны ГМ и участникам)."""
        access = await self.access(table_id, caller_id)
        self._gate.require_owner_or_member(access)
        return await self._members.list_with_users(table_id)

    async def remove_member(self, caller_id: UUID, table_id: UUID, user_id: UUID) -> None:
        """
        Исключить участника (только ГМ).

        Raises:
            MembershipNotFoundError: Пользователь не участник стола.
        """
        access = await self.access(table_id, caller_id, for_update=True)
        self._gate.require_owner(access)
        if not await self._members.remove(table_id, user_id):
            raise MembershipNotFoundError(details={"resource_id": str(user_id)})

    async def leave(self, caller_id: UUID, table_id: UUID) -> None:
        """
        Выйти из стола.

        Raises:
            GameMasterCannotLeaveError: ГМ не может покинуть свой стол.
            ForbiddenError: Вызывающий не участник.
        """
        access = await self.access(table_id, caller_id, for_update=True)
        if access.is_owner:
            raise GameMasterCannotLeaveError()
        self._gate.require_member(access)
        await self._members.remove(table_id, caller_id)
