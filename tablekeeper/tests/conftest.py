"""Pytest configuration and fixtures for Tablekeeper tests.

Storage tests run against an in-memory SQLite database (aiosqlite,
StaticPool, foreign keys on); API tests drive the ASGI app through
httpx without starting a server.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tablekeeper.core.config import (
    AppConfig,
    DatabaseConfig,
    JWTConfig,
    LoggingConfig,
    MetricsConfig,
    PasswordConfig,
    Settings,
)
from tablekeeper.core.database import (
    Base,
    create_engine_from_url,
    create_session_factory,
    db_manager,
)
from tablekeeper.core.security import PasswordHasher, TokenIssuer
from tablekeeper.main import create_app
from tablekeeper.tests.fixtures.sample_data import TEST_PASSWORD

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ==================== Settings Fixtures ====================


@pytest.fixture
def jwt_config() -> JWTConfig:
    return JWTConfig(secret_key=SecretStr("test-secret-key-with-enough-length"))


@pytest.fixture
def password_config() -> PasswordConfig:
    """Password policy with cheap Argon2 parameters."""
    return PasswordConfig(time_cost=1, memory_cost=8, parallelism=1, hash_workers=2)


@pytest.fixture
def settings(jwt_config: JWTConfig, password_config: PasswordConfig) -> Settings:
    return Settings(
        db=DatabaseConfig(url=TEST_DATABASE_URL),
        jwt=jwt_config,
        password=password_config,
        logging=LoggingConfig(level="WARNING"),
        metrics=MetricsConfig(enabled=False),
        app=AppConfig(debug=False),
    )


@pytest.fixture
def hasher(password_config: PasswordConfig) -> Generator[PasswordHasher, None, None]:
    hasher = PasswordHasher(password_config)
    yield hasher
    hasher.shutdown()


@pytest.fixture
def issuer(jwt_config: JWTConfig) -> TokenIssuer:
    return TokenIssuer(jwt_config)


# ==================== Database Fixtures ====================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with the full schema."""
    engine = create_engine_from_url(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


# ==================== API Fixtures ====================


@pytest.fixture
async def app(settings: Settings, engine: AsyncEngine) -> AsyncGenerator[Any, None]:
    """Application wired to the test database.

    Requests get their sessions from ``db_manager`` exactly like in
    production; lifespan is not run, so the engine is bound here.
    """
    db_manager.bind(engine)
    app = create_app(settings)
    yield app
    app.state.password_hasher.shutdown()
    await db_manager.close()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register_user(client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Register a user through the API and return the response body."""

    async def _register(username: str, **overrides: Any) -> dict[str, Any]:
        payload = {
            "username": username,
            "email": f"{username}@example.com",
            "password": TEST_PASSWORD,
        }
        payload.update(overrides)
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register
