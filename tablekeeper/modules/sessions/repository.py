"""Доступ к данным сессий, намерений и явки."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select

from tablekeeper.shared.errors import safe
from tablekeeper.shared.repository import BaseRepository

from .models import Session, SessionCheckin, SessionIntent


class SessionRepository(BaseRepository[Session]):
    model = Session

    @safe
    async def list_for_table(self, table_id: UUID) -> Sequence[Session]:
        """Сессии стола; без даты - в конце списка."""
        stmt = (
            select(Session)
            .where(Session.table_id == table_id)
            .order_by(Session.scheduled_for.is_(None), Session.scheduled_for, Session.id)
        )
        return (await self._session.execute(stmt)).scalars().all()


class SessionIntentRepository(BaseRepository[SessionIntent]):
    model = SessionIntent

    @safe
    async def list_for_session(self, session_id: UUID) -> Sequence[SessionIntent]:
        stmt = (
            select(SessionIntent)
            .where(SessionIntent.session_id == session_id)
            .order_by(SessionIntent.created_at, SessionIntent.id)
        )
        return (await self._session.execute(stmt)).scalars().all()


class SessionCheckinRepository(BaseRepository[SessionCheckin]):
    model = SessionCheckin

    @safe
    async def add_many(self, checkins: Sequence[SessionCheckin]) -> Sequence[SessionCheckin]:
        self._session.add_all(checkins)
        await self._session.flush()
        return checkins

    @safe
    async def list_for_session(self, session_id: UUID) -> Sequence[SessionCheckin]:
        stmt = (
            select(SessionCheckin)
            .join(SessionIntent, SessionIntent.id == SessionCheckin.session_intent_id)
            .where(SessionIntent.session_id == session_id)
            .order_by(SessionCheckin.created_at, SessionCheckin.id)
        )
        return (await self._session.execute(stmt)).scalars().all()
