"""
Проверки прав на изменение столов, заявок и сессий.

Проверки - чистые функции над снимком TableAccess. Сервис загружает
снимок в той же транзакции, в которой потом пишет (строка стола
читается с FOR UPDATE), поэтому между проверкой и записью состояние
не меняется.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from .exceptions import (
    AlreadyMemberError,
    CannotJoinOwnTableError,
    ForbiddenError,
    PendingRequestAlreadyExistsError,
    RequestAlreadyProcessedError,
    TableNotAcceptingPlayersError,
)

TABLE_OPEN_STATUS = "active"
REQUEST_PENDING_STATUS = "pending"


class OwnedTable(Protocol):
    id: UUID
    gm_id: UUID
    status: str


class JoinRequest(Protocol):
    id: UUID
    status: str


@dataclass(frozen=True)
class TableAccess:
    """Снимок отношения пользователя к столу."""

    table: OwnedTable
    caller_id: UUID
    is_member: bool = False
    has_pending_request: bool = False

    @property
    def is_owner(self) -> bool:
        return self.table.gm_id == self.caller_id


class AuthorizationGate:
    """Набор проверок, вызываемых сервисами перед изменением данных."""

    def require_owner(self, access: TableAccess) -> None:
        """
        Raises:
            ForbiddenError: Вызывающий не ГМ стола.
        """
        if not access.is_owner:
            raise ForbiddenError("Only the game master of this table can do this")

    def require_member(self, access: TableAccess) -> None:
        """
        Raises:
            ForbiddenError: Вызывающий не участник стола.
        """
        if not access.is_member:
            raise ForbiddenError("Only members of this table can do this")

    def require_owner_or_member(self, access: TableAccess) -> None:
        if not (access.is_owner or access.is_member):
            raise ForbiddenError("Only the game master or members of this table can do this")

    def require_not_owner_and_not_member(self, access: TableAccess) -> None:
        """
        Raises:
            CannotJoinOwnTableError: Вызывающий - ГМ стола.
            AlreadyMemberError: Вызывающий уже участник.
        """
        if access.is_owner:
            raise CannotJoinOwnTableError()
        if access.is_member:
            raise AlreadyMemberError()

    def require_no_pending_request(self, access: TableAccess) -> None:
        if access.has_pending_request:
            raise PendingRequestAlreadyExistsError()

    def require_table_open(self, access: TableAccess) -> None:
        if access.table.status != TABLE_OPEN_STATUS:
            raise TableNotAcceptingPlayersError()

    def require_pending(self, request: JoinRequest) -> None:
        """
        Approved и Rejected - конечные состояния заявки.

        Raises:
            RequestAlreadyProcessedError: Заявка уже обработана.
        """
        if request.status != REQUEST_PENDING_STATUS:
            raise RequestAlreadyProcessedError(details={"resource_id": str(request.id)})


gate = AuthorizationGate()
