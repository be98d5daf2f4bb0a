"""
Сервис заявок на вступление в стол.

Основные компоненты:
    - TableRequestService: подача, одобрение, отклонение и отзыв заявок
"""

import logging
from collections.abc import Sequence
from uuid import UUID

from tablekeeper.core.authorization import AuthorizationGate, TableAccess
from tablekeeper.core.exceptions import (
    ForbiddenError,
    RequestAlreadyProcessedError,
    TableFullError,
    TableNotFoundError,
    TableRequestNotFoundError,
)
from tablekeeper.core.metrics import record_join_request
from tablekeeper.modules.tables.models import Table, TableMembership
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository

from .models import TableRequest, TableRequestStatus
from .repository import TableRequestRepository

logger = logging.getLogger(__name__)


class TableRequestService:
    """
    Жизненный цикл заявки: pending -> approved | rejected.

    Проверки прав выполняются над снимком, загруженным в той же
    транзакции, что и последующая запись; строка стола блокируется.
    """

    def __init__(
        self,
        requests: TableRequestRepository,
        tables: TableRepository,
        members: MembershipRepository,
        gate: AuthorizationGate,
    ) -> None:
        self._requests = requests
        self._tables = tables
        self._members = members
        self._gate = gate

    async def _load_table(self, table_id: UUID) -> Table:
        table = await self._tables.get(table_id, for_update=True)
        if table is None:
            raise TableNotFoundError(details={"resource_id": str(table_id)})
        return table

    async def _load_request(self, request_id: UUID) -> TableRequest:
        request = await self._requests.get(request_id, for_update=True)
        if request is None:
            raise TableRequestNotFoundError(details={"resource_id": str(request_id)})
        return request

    async def create(self, caller_id: UUID, table_id: UUID, message: str | None) -> TableRequest:
        """
        Подать заявку.

        Raises:
            TableNotFoundError: Стол не найден.
            CannotJoinOwnTableError: Заявку подаёт ГМ стола.
            AlreadyMemberError: Пользователь уже участник.
            TableNotAcceptingPlayersError: Стол не в статусе active.
            PendingRequestAlreadyExistsError: Уже есть pending-заявка
                (проверка в сервисе и частичный уникальный индекс в БД).
        """
        table = await self._load_table(table_id)
        access = TableAccess(
            table=table,
            caller_id=caller_id,
            is_member=await self._members.is_member(table_id, caller_id),
            has_pending_request=await self._requests.has_pending(caller_id, table_id),
        )

        self._gate.require_not_owner_and_not_member(access)
        self._gate.require_table_open(access)
        self._gate.require_no_pending_request(access)

        request = await self._requests.add(
            TableRequest(user_id=caller_id, table_id=table_id, message=message)
        )
        record_join_request("created")
        logger.info(f"Join request {request.id} for table {table_id} from {caller_id}")
        return request

    async def _load_pending_as_owner(
        self, caller_id: UUID, request_id: UUID
    ) -> tuple[TableRequest, Table]:
        request = await self._load_request(request_id)
        table = await self._load_table(request.table_id)

        self._gate.require_owner(TableAccess(table=table, caller_id=caller_id))
        self._gate.require_pending(request)
        return request, table

    async def _mark(self, request: TableRequest, status: TableRequestStatus) -> TableRequest:
        decided = await self._requests.decide(request.id, status)
        if decided is None:
            # Заявку обработали между чтением и записью
            raise RequestAlreadyProcessedError(details={"resource_id": str(request.id)})
        return decided

    async def accept(self, caller_id: UUID, request_id: UUID) -> TableRequest:
        """
        Одобрить заявку: статус approved и ровно одна запись участника.

        Raises:
            ForbiddenError: Вызывающий не ГМ стола.
            RequestAlreadyProcessedError: Заявка уже обработана.
            TableNotAcceptingPlayersError: Стол закрыт.
            TableFullError: Свободных мест нет.
            UserAlreadyMemberOfTableError: Участник уже есть (уникальность в БД).
        """
        request, table = await self._load_pending_as_owner(caller_id, request_id)
        self._gate.require_table_open(TableAccess(table=table, caller_id=caller_id))

        if await self._members.count(table.id) >= table.player_slots:
            raise TableFullError(details={"resource_id": str(table.id)})

        decided = await self._mark(request, TableRequestStatus.APPROVED)
        await self._members.add(TableMembership(table_id=table.id, user_id=decided.user_id))
        record_join_request("approved")
        logger.info(f"Join request {request_id} approved by {caller_id}")
        return decided

    async def reject(self, caller_id: UUID, request_id: UUID) -> TableRequest:
        """
        Отклонить заявку.

        Raises:
            ForbiddenError: Вызывающий не ГМ стола.
            RequestAlreadyProcessedError: Заявка уже обработана.
        """
        request, _ = await self._load_pending_as_owner(caller_id, request_id)
        decided = await self._mark(request, TableRequestStatus.REJECTED)
        record_join_request("rejected")
        logger.info(f"Join request {request_id} rejected by {caller_id}")
        return decided

    async def withdraw(self, caller_id: UUID, request_id: UUID) -> None:
        """
        Отозвать собственную pending-заявку.

        Raises:
            ForbiddenError: Заявка принадлежит другому пользователю.
            RequestAlreadyProcessedError: Заявка уже обработана.
        """
        request = await self._load_request(request_id)
        if request.user_id != caller_id:
            raise ForbiddenError("Only the author can withdraw a request")
        self._gate.require_pending(request)
        await self._requests.delete(request.id)
        record_join_request("withdrawn")

    async def list_for_table(
        self,
        caller_id: UUID,
        table_id: UUID,
        status: TableRequestStatus | None = None,
    ) -> Sequence[TableRequest]:
        """Заявки в стол (только ГМ)."""
        table = await self._tables.get(table_id)
        if table is None:
            raise TableNotFoundError(details={"resource_id": str(table_id)})
        self._gate.require_owner(TableAccess(table=table, caller_id=caller_id))
        return await self._requests.list_for_table(table_id, status)

    async def list_mine(
        self, caller_id: UUID, status: TableRequestStatus | None = None
    ) -> Sequence[TableRequest]:
        return await self._requests.list_for_user(caller_id, status)
