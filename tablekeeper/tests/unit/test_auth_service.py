"""Unit tests for AuthService with mocked repositories and token store."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from tablekeeper.core.exceptions import (
    EmailAlreadyTakenError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    RefreshTokenAlreadyUsedError,
    UnauthenticatedError,
)
from tablekeeper.modules.auth.schemas import LoginRequest, RegisterRequest
from tablekeeper.modules.auth.service import AuthService
from tablekeeper.modules.auth.store import RotationResult

# ==================== Fixtures ====================


@pytest.fixture
def sample_user():
    user = MagicMock()
    user.id = uuid4()
    user.username = "alice"
    user.email = "alice@example.com"
    user.hashed_password = "$argon2id$v=19$m=8,t=1,p=1$stored"
    user.created_at = datetime.now(UTC)
    return user


@pytest.fixture
def users(sample_user):
    repo = AsyncMock()
    repo.add.side_effect = lambda user: user
    repo.get_by_email.return_value = sample_user
    repo.get.return_value = sample_user
    return repo


@pytest.fixture
def tokens():
    store = AsyncMock()
    store.issue.return_value = "refresh-1"
    store.revoke_all.return_value = 2
    return store


@pytest.fixture
def hasher():
    hasher = MagicMock()
    hasher.hash = AsyncMock(return_value="$argon2id$new")
    hasher.rehash = AsyncMock(return_value="$argon2id$rehashed")
    hasher.verify = AsyncMock(return_value=True)
    hasher.verify_dummy = AsyncMock()
    hasher.needs_rehash.return_value = False
    return hasher


@pytest.fixture
def service(users, tokens, hasher, issuer):
    return AuthService(users=users, tokens=tokens, hasher=hasher, issuer=issuer)


# ==================== register ====================


async def test_register_stores_hash_not_password(service, users, hasher):
    request = RegisterRequest(
        username="alice", email="Alice@Example.com", password="Str0ngPassword"
    )

    user = await service.register(request)

    hasher.hash.assert_awaited_once_with("Str0ngPassword")
    assert user.hashed_password == "$argon2id$new"
    assert user.email == "alice@example.com"
    users.add.assert_awaited_once()


async def test_register_propagates_duplicate_error(service, users):
    users.add.side_effect = EmailAlreadyTakenError()

    with pytest.raises(EmailAlreadyTakenError):
        await service.register(
            RegisterRequest(username="alice", email="alice@example.com", password="Str0ngPassword")
        )


# ==================== login ====================


async def test_login_success_issues_tokens(service, sample_user, tokens, issuer):
    result = await service.login(LoginRequest(email="alice@example.com", password="Str0ngPassword"))

    assert result.user is sample_user
    assert result.tokens.refresh_token == "refresh-1"
    assert issuer.validate(result.tokens.token).sub == sample_user.id
    tokens.issue.assert_awaited_once_with(sample_user.id)


async def test_login_unknown_email_burns_dummy_verification(service, users, hasher):
    users.get_by_email.return_value = None

    with pytest.raises(InvalidCredentialsError) as unknown:
        await service.login(LoginRequest(email="nobody@example.com", password="whatever"))

    hasher.verify_dummy.assert_awaited_once_with("whatever")
    hasher.verify.assert_not_awaited()
    assert unknown.value.message == InvalidCredentialsError().message


async def test_login_wrong_password_is_indistinguishable(service, hasher, tokens):
    hasher.verify.return_value = False

    with pytest.raises(InvalidCredentialsError) as wrong:
        await service.login(LoginRequest(email="alice@example.com", password="Wr0ngPassword"))

    assert wrong.value.code == "INVALID_CREDENTIALS"
    assert wrong.value.message == InvalidCredentialsError().message
    tokens.issue.assert_not_awaited()


async def test_login_rehashes_outdated_hash(service, users, hasher, sample_user):
    hasher.needs_rehash.return_value = True

    await service.login(LoginRequest(email="alice@example.com", password="Str0ngPassword"))

    hasher.rehash.assert_awaited_once_with("Str0ngPassword")
    assert sample_user.hashed_password == "$argon2id$rehashed"
    users.save.assert_awaited_once_with(sample_user)


# ==================== refresh / logout ====================


async def test_refresh_returns_new_pair(service, tokens, issuer):
    user_id = uuid4()
    tokens.rotate.return_value = RotationResult(user_id=user_id, refresh_token="refresh-2")

    pair = await service.refresh("refresh-1")

    assert pair.refresh_token == "refresh-2"
    assert issuer.validate(pair.token).sub == user_id
    assert pair.expires_in == issuer.expires_in


async def test_refresh_propagates_reuse_error(service, tokens):
    tokens.rotate.side_effect = RefreshTokenAlreadyUsedError()

    with pytest.raises(RefreshTokenAlreadyUsedError):
        await service.refresh("refresh-1")


async def test_logout_revokes_all_tokens(service, tokens):
    user_id = uuid4()

    assert await service.logout(user_id) == 2
    tokens.revoke_all.assert_awaited_once_with(user_id)


# ==================== me / password / account ====================


async def test_me_for_deleted_user(service, users):
    users.get.return_value = None

    with pytest.raises(UnauthenticatedError):
        await service.me(uuid4())


async def test_change_password_revokes_tokens(service, hasher, tokens, users, sample_user):
    revoked = await service.change_password(sample_user.id, "Str0ngPassword", "N3wPassword!")

    assert revoked == 2
    hasher.hash.assert_awaited_once_with("N3wPassword!")
    assert sample_user.hashed_password == "$argon2id$new"
    tokens.revoke_all.assert_awaited_once_with(sample_user.id)


async def test_change_password_requires_current_password(service, hasher, tokens, sample_user):
    hasher.verify.return_value = False

    with pytest.raises(IncorrectPasswordError) as exc_info:
        await service.change_password(sample_user.id, "wrong", "N3wPassword!")

    assert exc_info.value.status_code == 403
    tokens.revoke_all.assert_not_awaited()


async def test_delete_account(service, users, sample_user):
    await service.delete_account(sample_user.id, "Str0ngPassword")

    users.delete.assert_awaited_once_with(sample_user.id)


async def test_delete_account_with_wrong_password(service, users, hasher, sample_user):
    hasher.verify.return_value = False

    with pytest.raises(IncorrectPasswordError):
        await service.delete_account(sample_user.id, "wrong")
    users.delete.assert_not_awaited()
