"""
Конфигурация приложения.
Все значения читаются из переменных окружения (или .env).
"""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Конфигурация подключения к PostgreSQL."""

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    host: str = "localhost"
    port: int = 5432
    user: str = "tablekeeper"
    password: str = "tablekeeper"
    name: str = "tablekeeper"
    pool_size: int = 5
    max_overflow: int = 10
    # Полный URL перекрывает host/port/... (например sqlite+aiosqlite:// в тестах)
    url: str | None = None

    @property
    def async_url(self) -> str:
        """URL для asyncpg драйвера."""
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"
        )


class JWTConfig(BaseSettings):
    """Конфигурация JWT и refresh токенов."""

    model_config = SettingsConfigDict(env_prefix="JWT_", env_file=".env", extra="ignore")

    secret_key: SecretStr = SecretStr("change-me-in-production")
    algorithm: str = "HS256"
    # 24 часа
    access_token_expire_minutes: int = 1440
    refresh_token_expire_days: int = 30
    leeway_seconds: int = 0
    # Повторное использование refresh токена отзывает все токены пользователя
    revoke_all_on_reuse: bool = True


class PasswordConfig(BaseSettings):
    """Политика паролей и параметры Argon2id."""

    model_config = SettingsConfigDict(env_prefix="PASSWORD_", env_file=".env", extra="ignore")

    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = False
    # Файл со списком распространённых паролей, по одному на строку
    common_passwords_file: str | None = None

    time_cost: int = 3
    memory_cost: int = 65536
    parallelism: int = 4
    hash_workers: int = 4


class LoggingConfig(BaseSettings):
    """Конфигурация логирования."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    # console | json
    format: str = "console"


class MetricsConfig(BaseSettings):
    """Конфигурация Prometheus метрик."""

    model_config = SettingsConfigDict(env_prefix="METRICS_", env_file=".env", extra="ignore")

    enabled: bool = True


class AppConfig(BaseSettings):
    """Общая конфигурация приложения."""

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")

    name: str = "Tablekeeper"
    version: str = "1.0.0"
    debug: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Список CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class Settings:
    """Агрегатор всех конфигураций."""

    def __init__(
        self,
        *,
        db: DatabaseConfig | None = None,
        jwt: JWTConfig | None = None,
        password: PasswordConfig | None = None,
        logging: LoggingConfig | None = None,
        metrics: MetricsConfig | None = None,
        app: AppConfig | None = None,
    ) -> None:
        self.db = db or DatabaseConfig()
        self.jwt = jwt or JWTConfig()
        self.password = password or PasswordConfig()
        self.logging = logging or LoggingConfig()
        self.metrics = metrics or MetricsConfig()
        self.app = app or AppConfig()


@lru_cache
def get_settings() -> Settings:
    """Получить синглтон настроек (кешируется)."""
    return Settings()
