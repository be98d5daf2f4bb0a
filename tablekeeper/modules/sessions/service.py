"""
Сервисы игровых сессий.

Основные компоненты:
    - SessionService: планирование, изменение и завершение сессий (ГМ)
    - SessionIntentService: намерения участников прийти на сессию
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from tablekeeper.core.authorization import AuthorizationGate, TableAccess
from tablekeeper.core.exceptions import (
    ForbiddenError,
    SessionIntentNotFoundError,
    SessionNotEditableError,
    SessionNotFoundError,
    SessionNotOpenForIntentsError,
    TableNotFoundError,
    ValidationError,
)
from tablekeeper.core.metrics import SESSIONS_FINALIZED
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository
from tablekeeper.shared.update import apply_changes, changes_from

from .models import IntentStatus, Session, SessionCheckin, SessionIntent, SessionStatus
from .repository import SessionCheckinRepository, SessionIntentRepository, SessionRepository
from .schemas import CheckinEntry, SessionCreate, SessionUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Finalization:
    session: Session
    checkins: Sequence[SessionCheckin]


class _TableScoped:
    """Общая загрузка снимка доступа к столу сессии."""

    def __init__(
        self,
        sessions: SessionRepository,
        tables: TableRepository,
        members: MembershipRepository,
        gate: AuthorizationGate,
    ) -> None:
        self._sessions = sessions
        self._tables = tables
        self._members = members
        self._gate = gate

    async def _access(self, table_id: UUID, caller_id: UUID, *, for_update: bool = False) -> TableAccess:
        table = await self._tables.get(table_id, for_update=for_update)
        if table is None:
            raise TableNotFoundError(details={"resource_id": str(table_id)})
        return TableAccess(
            table=table,
            caller_id=caller_id,
            is_member=await self._members.is_member(table_id, caller_id),
        )

    async def _load_session(self, session_id: UUID, *, for_update: bool = False) -> Session:
        session = await self._sessions.get(session_id, for_update=for_update)
        if session is None:
            raise SessionNotFoundError(details={"resource_id": str(session_id)})
        return session


class SessionService(_TableScoped):
    """Команды над сессиями. Менять сессии может только ГМ стола."""

    def __init__(
        self,
        sessions: SessionRepository,
        intents: SessionIntentRepository,
        checkins: SessionCheckinRepository,
        tables: TableRepository,
        members: MembershipRepository,
        gate: AuthorizationGate,
    ) -> None:
        super().__init__(sessions, tables, members, gate)
        self._intents = intents
        self._checkins = checkins

    async def _load_editable(self, caller_id: UUID, session_id: UUID) -> Session:
        session = await self._load_session(session_id, for_update=True)
        access = await self._access(session.table_id, caller_id, for_update=True)
        self._gate.require_owner(access)
        if session.is_terminal:
            raise SessionNotEditableError(details={"resource_id": str(session_id)})
        return session

    async def schedule(self, caller_id: UUID, table_id: UUID, data: SessionCreate) -> Session:
        """
        Запланировать сессию стола.

        Raises:
            TableNotFoundError: Стол не найден.
            ForbiddenError: Вызывающий не ГМ.
        """
        access = await self._access(table_id, caller_id, for_update=True)
        self._gate.require_owner(access)
        session = await self._sessions.add(
            Session(
                table_id=table_id,
                title=data.title,
                description=data.description,
                scheduled_for=data.scheduled_for,
            )
        )
        logger.info(f"Session {session.id} scheduled for table {table_id}")
        return session

    async def get(self, caller_id: UUID, session_id: UUID) -> Session:
        """Сессия (видна ГМ и участникам стола)."""
        session = await self._load_session(session_id)
        self._gate.require_owner_or_member(await self._access(session.table_id, caller_id))
        return session

    async def list_for_table(self, caller_id: UUID, table_id: UUID) -> Sequence[Session]:
        self._gate.require_owner_or_member(await self._access(table_id, caller_id))
        return await self._sessions.list_for_table(table_id)

    async def update(self, caller_id: UUID, session_id: UUID, data: SessionUpdate) -> Session:
        """
        Обновить сессию.

        Raises:
            ForbiddenError: Вызывающий не ГМ.
            SessionNotEditableError: Сессия завершена или отменена.
        """
        session = await self._load_editable(caller_id, session_id)
        if apply_changes(session, changes_from(data)):
            await self._sessions.save(session)
        return session

    async def delete(self, caller_id: UUID, session_id: UUID) -> None:
        session = await self._load_session(session_id, for_update=True)
        self._gate.require_owner(await self._access(session.table_id, caller_id, for_update=True))
        await self._sessions.delete(session_id)
        logger.info(f"Session {session_id} deleted by {caller_id}")

    async def finalize(
        self, caller_id: UUID, session_id: UUID, entries: Sequence[CheckinEntry]
    ) -> Finalization:
        """
        Завершить сессию и записать явку.

        Для участника без намерения создаётся намерение ``unsure``,
        к которому привязывается запись явки.

        Raises:
            ForbiddenError: Вызывающий не ГМ.
            SessionNotEditableError: Сессия уже завершена или отменена.
            ValidationError: Пользователь повторяется или не участник стола.
        """
        session = await self._load_editable(caller_id, session_id)

        seen: set[UUID] = set()
        for entry in entries:
            if entry.user_id in seen:
                raise ValidationError(
                    message="Duplicate check-in entry",
                    details={"field": "checkins", "resource_id": str(entry.user_id)},
                )
            seen.add(entry.user_id)

        intents = {i.user_id: i for i in await self._intents.list_for_session(session_id)}
        checkins: list[SessionCheckin] = []
        for entry in entries:
            intent = intents.get(entry.user_id)
            if intent is None:
                if not await self._members.is_member(session.table_id, entry.user_id):
                    raise ValidationError(
                        message="Only table members can be checked in",
                        details={"field": "checkins", "resource_id": str(entry.user_id)},
                    )
                intent = await self._intents.add(
                    SessionIntent(user_id=entry.user_id, session_id=session_id)
                )
            checkins.append(
                SessionCheckin(
                    session_intent_id=intent.id,
                    attendance=entry.attendance,
                    notes=entry.notes,
                )
            )

        await self._checkins.add_many(checkins)
        session.status = SessionStatus.COMPLETED
        await self._sessions.save(session)
        SESSIONS_FINALIZED.inc()
        logger.info(f"Session {session_id} finalized with {len(checkins)} check-ins")
        return Finalization(session=session, checkins=checkins)


class SessionIntentService(_TableScoped):
    """Намерения участников стола."""

    def __init__(
        self,
        intents: SessionIntentRepository,
        sessions: SessionRepository,
        tables: TableRepository,
        members: MembershipRepository,
        gate: AuthorizationGate,
    ) -> None:
        super().__init__(sessions, tables, members, gate)
        self._intents = intents

    async def declare(self, caller_id: UUID, session_id: UUID, status: IntentStatus) -> SessionIntent:
        """
        Заявить намерение.

        Повторное намерение отклоняет уникальное ограничение
        (UserSessionIntentAlreadyExistsError).

        Raises:
            ForbiddenError: Вызывающий не участник стола.
            SessionNotOpenForIntentsError: Сессия не в статусе scheduled.
        """
        session = await self._load_session(session_id)
        self._gate.require_member(await self._access(session.table_id, caller_id))
        if session.status != SessionStatus.SCHEDULED:
            raise SessionNotOpenForIntentsError(details={"resource_id": str(session_id)})
        return await self._intents.add(
            SessionIntent(user_id=caller_id, session_id=session_id, status=status)
        )

    async def update(self, caller_id: UUID, intent_id: UUID, status: IntentStatus) -> SessionIntent:
        """
        Изменить своё намерение.

        Raises:
            SessionIntentNotFoundError: Намерение не найдено.
            ForbiddenError: Намерение принадлежит другому пользователю.
            SessionNotOpenForIntentsError: Сессия уже не в статусе scheduled.
        """
        intent = await self._intents.get(intent_id, for_update=True)
        if intent is None:
            raise SessionIntentNotFoundError(details={"resource_id": str(intent_id)})
        if intent.user_id != caller_id:
            raise ForbiddenError("Only the author can change an intent")

        session = await self._load_session(intent.session_id)
        if session.status != SessionStatus.SCHEDULED:
            raise SessionNotOpenForIntentsError(details={"resource_id": str(session.id)})

        if intent.status != status:
            intent.status = status
            await self._intents.save(intent)
        return intent

    async def list_for_session(self, caller_id: UUID, session_id: UUID) -> Sequence[SessionIntent]:
        session = await self._load_session(session_id)
        self._gate.require_owner_or_member(await self._access(session.table_id, caller_id))
        return await self._intents.list_for_session(session_id)
