"""Доступ к данным заявок."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import exists, select, update

from tablekeeper.shared.errors import safe
from tablekeeper.shared.mixins import utcnow
from tablekeeper.shared.repository import BaseRepository

from .models import TableRequest, TableRequestStatus


class TableRequestRepository(BaseRepository[TableRequest]):
    model = TableRequest

    @safe
    async def has_pending(self, user_id: UUID, table_id: UUID) -> bool:
        stmt = select(
            exists().where(
                TableRequest.user_id == user_id,
                TableRequest.table_id == table_id,
                TableRequest.status == TableRequestStatus.PENDING,
            )
        )
        return bool((await self._session.execute(stmt)).scalar())

    @safe
    async def decide(self, request_id: UUID, status: TableRequestStatus) -> TableRequest | None:
        """
        Перевести pending-заявку в конечный статус.

        Условный UPDATE: если заявку уже обработали, возвращает None.
        """
        now = utcnow()
        stmt = (
            update(TableRequest)
            .where(
                TableRequest.id == request_id,
                TableRequest.status == TableRequestStatus.PENDING,
            )
            .values(status=status, decided_at=now, updated_at=now)
            .returning(TableRequest)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    @safe
    async def list_for_table(
        self, table_id: UUID, status: TableRequestStatus | None = None
    ) -> Sequence[TableRequest]:
        stmt = select(TableRequest).where(TableRequest.table_id == table_id)
        if status is not None:
            stmt = stmt.where(TableRequest.status == status)
        stmt = stmt.order_by(TableRequest.created_at, TableRequest.id)
        return (await self._session.execute(stmt)).scalars().all()

    @safe
    async def list_for_user(
        self, user_id: UUID, status: TableRequestStatus | None = None
    ) -> Sequence[TableRequest]:
        stmt = select(TableRequest).where(TableRequest.user_id == user_id)
        if status is not None:
            stmt = stmt.where(TableRequest.status == status)
        stmt = stmt.order_by(TableRequest.created_at.desc(), TableRequest.id.desc())
        return (await self._session.execute(stmt)).scalars().all()
