"""Integration tests for RefreshTokenStore against a real database."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tablekeeper.core.config import JWTConfig
from tablekeeper.core.database import DatabaseManager
from tablekeeper.core.exceptions import (
    RefreshTokenAlreadyUsedError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenRevokedError,
)
from tablekeeper.modules.auth.models import RefreshToken
from tablekeeper.modules.auth.store import RefreshTokenStore, purge_expired_tokens
from tablekeeper.shared.mixins import utcnow
from tablekeeper.tests.factories import UserFactory


@pytest.fixture
def store(db_session: AsyncSession, jwt_config: JWTConfig) -> RefreshTokenStore:
    return RefreshTokenStore(db_session, jwt_config)


async def _tokens_of(session: AsyncSession, user_id) -> list[RefreshToken]:
    result = await session.execute(
        select(RefreshToken)
        .where(RefreshToken.user_id == user_id)
        .order_by(RefreshToken.created_at, RefreshToken.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


class TestIssue:
    async def test_only_hash_is_stored(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)

        raw = await store.issue(user.id)

        [token] = await _tokens_of(db_session, user.id)
        assert token.token_hash == RefreshTokenStore.hash_token(raw)
        assert token.token_hash != raw
        assert token.is_active

    async def test_tokens_are_unique_per_issue(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)

        first = await store.issue(user.id)
        second = await store.issue(user.id)

        assert first != second
        assert len(await _tokens_of(db_session, user.id)) == 2


class TestRotate:
    async def test_rotation_consumes_old_and_links_new(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        raw = await store.issue(user.id)

        result = await store.rotate(raw)

        assert result.user_id == user.id
        assert result.refresh_token != raw
        old, new = await _tokens_of(db_session, user.id)
        assert old.is_consumed
        assert old.replaced_by_id == new.id
        assert new.is_active

    async def test_unknown_token(self, store):
        with pytest.raises(RefreshTokenNotFoundError):
            await store.rotate("no-such-token")

    async def test_replay_revokes_every_token_of_user(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        other_device = await store.issue(user.id)
        raw = await store.issue(user.id)
        rotated = await store.rotate(raw)

        with pytest.raises(RefreshTokenAlreadyUsedError):
            await store.rotate(raw)

        # Revocation is committed before the error is raised
        await db_session.rollback()
        for token in await _tokens_of(db_session, user.id):
            assert not token.is_active

        with pytest.raises(RefreshTokenRevokedError):
            await store.rotate(rotated.refresh_token)
        with pytest.raises(RefreshTokenRevokedError):
            await store.rotate(other_device)

    async def test_replay_without_family_revocation(self, db_session, jwt_config):
        config = jwt_config.model_copy(update={"revoke_all_on_reuse": False})
        store = RefreshTokenStore(db_session, config)
        user = await UserFactory.create_async(session=db_session)
        raw = await store.issue(user.id)
        rotated = await store.rotate(raw)

        with pytest.raises(RefreshTokenAlreadyUsedError):
            await store.rotate(raw)

        # The successor stays usable
        assert (await store.rotate(rotated.refresh_token)).user_id == user.id

    async def test_revoked_token(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        raw = await store.issue(user.id)

        assert await store.revoke(raw) is True
        assert await store.revoke(raw) is False

        with pytest.raises(RefreshTokenRevokedError):
            await store.rotate(raw)

    async def test_expired_token(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        raw = await store.issue(user.id)
        await db_session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user.id)
            .values(expires_at=utcnow() - timedelta(minutes=1))
        )

        with pytest.raises(RefreshTokenExpiredError):
            await store.rotate(raw)

    async def test_concurrent_rotation_has_single_winner(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        jwt_config: JWTConfig,
    ):
        async with session_factory() as session:
            user = await UserFactory.create_async(session=session)
            raw = await RefreshTokenStore(session, jwt_config).issue(user.id)
            await session.commit()

        async def attempt() -> str:
            async with session_factory() as session:
                try:
                    await RefreshTokenStore(session, jwt_config).rotate(raw)
                    await session.commit()
                    return "rotated"
                except RefreshTokenAlreadyUsedError:
                    return "reused"

        outcomes = await asyncio.gather(attempt(), attempt())

        assert sorted(outcomes) == ["reused", "rotated"]


class TestRevokeAll:
    async def test_revokes_only_active_tokens_of_user(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        stranger = await UserFactory.create_async(session=db_session)
        await store.issue(user.id)
        consumed = await store.issue(user.id)
        await store.rotate(consumed)
        stranger_raw = await store.issue(stranger.id)

        # One issued + one rotated successor; the consumed one is untouched
        assert await store.revoke_all(user.id) == 2
        assert await store.revoke_all(user.id) == 0

        assert (await store.rotate(stranger_raw)).user_id == stranger.id

    async def test_purge_expired(self, db_session, store):
        user = await UserFactory.create_async(session=db_session)
        await store.issue(user.id)
        expired = await store.issue(user.id)
        await db_session.execute(
            update(RefreshToken)
            .where(RefreshToken.token_hash == RefreshTokenStore.hash_token(expired))
            .values(expires_at=utcnow() - timedelta(days=1))
        )

        assert await store.purge_expired() == 1
        assert len(await _tokens_of(db_session, user.id)) == 1

    async def test_maintenance_purge_commits_deletion(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        jwt_config: JWTConfig,
    ):
        async with session_factory() as session:
            user = await UserFactory.create_async(session=session)
            store = RefreshTokenStore(session, jwt_config)
            await store.issue(user.id)
            expired = await store.issue(user.id)
            await session.execute(
                update(RefreshToken)
                .where(RefreshToken.token_hash == RefreshTokenStore.hash_token(expired))
                .values(expires_at=utcnow() - timedelta(days=1))
            )
            await session.commit()

        manager = DatabaseManager()
        manager.bind(engine)

        assert await purge_expired_tokens(manager, jwt_config) == 1
        assert await purge_expired_tokens(manager, jwt_config) == 0

        async with session_factory() as session:
            assert len(await _tokens_of(session, user.id)) == 1
