"""
Асинхронная настройка SQLAlchemy с пулом соединений.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import MetaData, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from .config import DatabaseConfig
from .constraints import install_constraint_translator

# Соглашения об именовании для constraints.
# На этих именах построен перевод ошибок целостности в доменные ошибки.
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Базовый класс для всех моделей."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:
        columns = ", ".join(
            f"{col.name}={getattr(self, col.name)!r}" for col in self.__table__.columns
        )
        return f"{self.__class__.__name__}({columns})"


def create_engine_from_url(url: str, *, echo: bool = False, **pool_kwargs: Any) -> AsyncEngine:
    """
    Создать движок с учётом диалекта.

    Для SQLite используется StaticPool и включаются внешние ключи,
    для PostgreSQL - пул соединений.
    """
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ANN001, ARG001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        url,
        poolclass=AsyncAdaptedQueuePool,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
        **pool_kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Фабрика сессий с едиными настройками."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


class DatabaseManager:
    """Менеджер базы данных с поддержкой пула соединений."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Получить движок базы данных."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Получить фабрику сессий."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._session_factory

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init(self, config: DatabaseConfig, *, echo: bool = False) -> None:
        """Инициализировать подключение к базе данных."""
        if self._engine is not None:
            return

        self._engine = create_engine_from_url(
            config.async_url,
            echo=echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
        )
        self._session_factory = create_session_factory(self._engine)

    def bind(self, engine: AsyncEngine) -> None:
        """Использовать готовый движок (тесты, скрипты)."""
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def create_all(self) -> None:
        """Создать схему по метаданным моделей."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Закрыть все соединения."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Контекстный менеджер для сессии с автоматическим коммитом/откатом."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Генератор сессий для FastAPI Depends."""
        async with self.session() as session:
            yield session

    async def health_check(self) -> bool:
        """Проверка работоспособности базы данных."""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            return False


# Глобальный экземпляр менеджера БД
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency для получения сессии базы данных."""
    async for session in db_manager.get_session():
        yield session


# IntegrityError из репозиториев переводится по ограничениям этих метаданных
install_constraint_translator(Base.metadata)
