"""Unit tests for the authorization gate predicates."""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from tablekeeper.core.authorization import AuthorizationGate, TableAccess
from tablekeeper.core.exceptions import (
    AlreadyMemberError,
    CannotJoinOwnTableError,
    ForbiddenError,
    PendingRequestAlreadyExistsError,
    RequestAlreadyProcessedError,
    TableNotAcceptingPlayersError,
)


@dataclass
class FakeTable:
    gm_id: UUID
    status: str = "active"
    id: UUID = None  # type: ignore[assignment]


@dataclass
class FakeRequest:
    status: str
    id: UUID = None  # type: ignore[assignment]


@pytest.fixture
def gate() -> AuthorizationGate:
    return AuthorizationGate()


@pytest.fixture
def gm_id() -> UUID:
    return uuid4()


@pytest.fixture
def table(gm_id) -> FakeTable:
    return FakeTable(gm_id=gm_id, id=uuid4())


class TestOwnership:
    def test_owner_passes(self, gate, table, gm_id):
        gate.require_owner(TableAccess(table=table, caller_id=gm_id))

    def test_non_owner_is_forbidden(self, gate, table):
        with pytest.raises(ForbiddenError) as exc_info:
            gate.require_owner(TableAccess(table=table, caller_id=uuid4()))
        assert exc_info.value.status_code == 403

    def test_member_is_not_owner(self, gate, table):
        with pytest.raises(ForbiddenError):
            gate.require_owner(TableAccess(table=table, caller_id=uuid4(), is_member=True))


class TestMembership:
    def test_member_passes(self, gate, table):
        gate.require_member(TableAccess(table=table, caller_id=uuid4(), is_member=True))

    def test_stranger_is_forbidden(self, gate, table):
        with pytest.raises(ForbiddenError):
            gate.require_member(TableAccess(table=table, caller_id=uuid4()))

    def test_owner_or_member(self, gate, table, gm_id):
        gate.require_owner_or_member(TableAccess(table=table, caller_id=gm_id))
        gate.require_owner_or_member(TableAccess(table=table, caller_id=uuid4(), is_member=True))
        with pytest.raises(ForbiddenError):
            gate.require_owner_or_member(TableAccess(table=table, caller_id=uuid4()))


class TestJoinRules:
    def test_stranger_may_join(self, gate, table):
        gate.require_not_owner_and_not_member(TableAccess(table=table, caller_id=uuid4()))

    def test_gm_cannot_join_own_table(self, gate, table, gm_id):
        with pytest.raises(CannotJoinOwnTableError) as exc_info:
            gate.require_not_owner_and_not_member(TableAccess(table=table, caller_id=gm_id))
        assert exc_info.value.status_code == 422

    def test_member_cannot_join_again(self, gate, table):
        access = TableAccess(table=table, caller_id=uuid4(), is_member=True)

        with pytest.raises(AlreadyMemberError):
            gate.require_not_owner_and_not_member(access)

    def test_pending_request_blocks_new_one(self, gate, table):
        gate.require_no_pending_request(TableAccess(table=table, caller_id=uuid4()))

        access = TableAccess(table=table, caller_id=uuid4(), has_pending_request=True)
        with pytest.raises(PendingRequestAlreadyExistsError):
            gate.require_no_pending_request(access)

    @pytest.mark.parametrize("status", ["finished", "cancelled"])
    def test_closed_table_does_not_accept_players(self, gate, gm_id, status):
        access = TableAccess(table=FakeTable(gm_id=gm_id, status=status), caller_id=uuid4())

        with pytest.raises(TableNotAcceptingPlayersError):
            gate.require_table_open(access)


class TestRequestState:
    def test_pending_request_passes(self, gate):
        gate.require_pending(FakeRequest(status="pending", id=uuid4()))

    @pytest.mark.parametrize("status", ["approved", "rejected"])
    def test_terminal_request_is_rejected(self, gate, status):
        with pytest.raises(RequestAlreadyProcessedError):
            gate.require_pending(FakeRequest(status=status, id=uuid4()))


def test_gate_has_no_side_effects_on_snapshot(gate, table, gm_id):
    access = TableAccess(table=table, caller_id=gm_id)

    gate.require_owner(access)

    assert access.table is table
    assert table.status == "active"
