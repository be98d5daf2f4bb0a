"""Repository tests: storage constraints surface as domain errors."""

import pytest
from sqlalchemy import select

from tablekeeper.core.exceptions import (
    EmailAlreadyTakenError,
    ForeignKeyViolationError,
    PendingRequestAlreadyExistsError,
    UserAlreadyMemberOfTableError,
    UsernameAlreadyTakenError,
    UserSessionIntentAlreadyExistsError,
    ValidationError,
)
from tablekeeper.modules.sessions.models import Session, SessionIntent
from tablekeeper.modules.sessions.repository import SessionIntentRepository, SessionRepository
from tablekeeper.modules.table_requests.models import TableRequest, TableRequestStatus
from tablekeeper.modules.table_requests.repository import TableRequestRepository
from tablekeeper.modules.tables.models import Table, TableMembership
from tablekeeper.modules.tables.repository import MembershipRepository, TableRepository
from tablekeeper.modules.users.models import User
from tablekeeper.modules.users.repository import UserRepository
from tablekeeper.shared.uuid7 import uuid7
from tablekeeper.tests.factories import (
    SessionFactory,
    SessionIntentFactory,
    TableFactory,
    TableMembershipFactory,
    TableRequestFactory,
    UserFactory,
)


@pytest.fixture
async def gm(db_session):
    return await UserFactory.create_async(session=db_session)


@pytest.fixture
async def player(db_session):
    return await UserFactory.create_async(session=db_session)


@pytest.fixture
async def table(db_session, gm):
    table = await TableFactory.create_async(session=db_session, gm_id=gm.id)
    # Violations below poison the session; setup must survive them
    await db_session.commit()
    return table


class TestUserRepository:
    async def test_duplicate_username(self, db_session, gm):
        await db_session.commit()
        repo = UserRepository(db_session)

        with pytest.raises(UsernameAlreadyTakenError):
            await repo.add(User(username=gm.username, email="new@example.com", hashed_password="x"))

    async def test_duplicate_email(self, db_session, gm):
        await db_session.commit()
        repo = UserRepository(db_session)

        with pytest.raises(EmailAlreadyTakenError):
            await repo.add(User(username="newcomer", email=gm.email, hashed_password="x"))

    async def test_get_by_email_is_case_insensitive(self, db_session, gm):
        repo = UserRepository(db_session)

        found = await repo.get_by_email(gm.email.upper())

        assert found is not None
        assert found.id == gm.id

    async def test_delete_cascades_to_memberships_and_requests(self, db_session, table, player):
        await TableMembershipFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id
        )
        await TableRequestFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id, status="rejected"
        )

        assert await UserRepository(db_session).delete(player.id) is True

        members = await db_session.execute(
            select(TableMembership).where(TableMembership.user_id == player.id)
        )
        requests = await db_session.execute(
            select(TableRequest).where(TableRequest.user_id == player.id)
        )
        assert members.first() is None
        assert requests.first() is None


class TestTableRepository:
    async def test_player_slots_check_constraint(self, db_session, gm):
        await db_session.commit()

        with pytest.raises(ValidationError):
            await TableRepository(db_session).add(
                Table(gm_id=gm.id, title="Broken", player_slots=0)
            )

    async def test_unknown_gm(self, db_session):
        with pytest.raises(ForeignKeyViolationError):
            await TableRepository(db_session).add(
                Table(gm_id=uuid7(), title="Orphan", player_slots=3)
            )

    async def test_search_mine_includes_gm_and_member_tables(self, db_session, gm, player):
        own = await TableFactory.create_async(session=db_session, gm_id=player.id)
        joined = await TableFactory.create_async(session=db_session, gm_id=gm.id)
        await TableFactory.create_async(session=db_session, gm_id=gm.id)
        await TableMembershipFactory.create_async(
            session=db_session, table_id=joined.id, user_id=player.id
        )

        tables, total = await TableRepository(db_session).search(member_id=player.id)

        assert total == 2
        assert {t.id for t in tables} == {own.id, joined.id}

    async def test_search_filters_and_paginates(self, db_session, gm):
        await TableFactory.create_batch_async(db_session, 3, gm_id=gm.id)
        await TableFactory.create_async(session=db_session, gm_id=gm.id, status="finished")

        tables, total = await TableRepository(db_session).search(status="active", limit=2)

        assert total == 3
        assert len(tables) == 2


class TestMembershipRepository:
    async def test_duplicate_membership(self, db_session, table, player):
        await TableMembershipFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id
        )
        await db_session.commit()

        with pytest.raises(UserAlreadyMemberOfTableError):
            await MembershipRepository(db_session).add(
                TableMembership(table_id=table.id, user_id=player.id)
            )

    async def test_count_and_remove(self, db_session, table, player):
        repo = MembershipRepository(db_session)
        await repo.add(TableMembership(table_id=table.id, user_id=player.id))

        assert await repo.is_member(table.id, player.id)
        assert await repo.count(table.id) == 1
        assert await repo.remove(table.id, player.id) is True
        assert await repo.remove(table.id, player.id) is False
        assert await repo.count(table.id) == 0

    async def test_list_with_users(self, db_session, table, player):
        await TableMembershipFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id
        )

        [member] = await MembershipRepository(db_session).list_with_users(table.id)

        assert member["user_id"] == player.id
        assert member["username"] == player.username


class TestTableRequestRepository:
    async def test_second_pending_request_is_rejected(self, db_session, table, player):
        await TableRequestFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id
        )
        await db_session.commit()

        with pytest.raises(PendingRequestAlreadyExistsError):
            await TableRequestRepository(db_session).add(
                TableRequest(table_id=table.id, user_id=player.id)
            )

    async def test_decided_requests_do_not_block_new_one(self, db_session, table, player):
        repo = TableRequestRepository(db_session)
        first = await repo.add(TableRequest(table_id=table.id, user_id=player.id))
        await repo.decide(first.id, TableRequestStatus.REJECTED)

        second = await repo.add(TableRequest(table_id=table.id, user_id=player.id))

        assert second.id != first.id
        assert await repo.has_pending(player.id, table.id)

    async def test_decide_only_once(self, db_session, table, player):
        repo = TableRequestRepository(db_session)
        request = await repo.add(TableRequest(table_id=table.id, user_id=player.id))

        decided = await repo.decide(request.id, TableRequestStatus.APPROVED)

        assert decided is not None
        assert decided.status == TableRequestStatus.APPROVED
        assert decided.decided_at is not None
        assert await repo.decide(request.id, TableRequestStatus.REJECTED) is None

    async def test_list_filters_by_status(self, db_session, table, player):
        await TableRequestFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id, status="rejected"
        )
        await TableRequestFactory.create_async(
            session=db_session, table_id=table.id, user_id=player.id
        )
        repo = TableRequestRepository(db_session)

        assert len(await repo.list_for_table(table.id)) == 2
        assert len(await repo.list_for_user(player.id, TableRequestStatus.PENDING)) == 1


class TestSessionRepositories:
    async def test_duplicate_intent(self, db_session, table, player):
        session = await SessionFactory.create_async(session=db_session, table_id=table.id)
        await SessionIntentFactory.create_async(
            session=db_session, session_id=session.id, user_id=player.id
        )
        await db_session.commit()

        with pytest.raises(UserSessionIntentAlreadyExistsError):
            await SessionIntentRepository(db_session).add(
                SessionIntent(session_id=session.id, user_id=player.id)
            )

    async def test_sessions_without_date_come_last(self, db_session, table):
        undated = await SessionFactory.create_async(session=db_session, table_id=table.id)
        dated = await SessionRepository(db_session).add(
            Session(
                table_id=table.id,
                title="Dated",
                scheduled_for=undated.created_at,
            )
        )

        sessions = await SessionRepository(db_session).list_for_table(table.id)

        assert [s.id for s in sessions] == [dated.id, undated.id]

    async def test_table_delete_cascades_to_sessions(self, db_session, table):
        session = await SessionFactory.create_async(session=db_session, table_id=table.id)

        await TableRepository(db_session).delete(table.id)

        result = await db_session.execute(select(Session.id).where(Session.id == session.id))
        assert result.first() is None
