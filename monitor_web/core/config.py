from __future__ import annotations

import os
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MONITOR_WEB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "monitor-web"
    ENV: str = "dev"

    # MySQL connection parts; DATABASE_URL wins when set explicitly
    DB_HOST: str = "localhost"
    DB_PORT: str = "3306"
    DB_NAME: str = "monitor_db"
    DB_USER: str = "root"
    DB_PASS: str = ""
    DATABASE_URL: str | None = None

    # Pool sizing mirrors the probe fan-in: few idle, many burst connections
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 90
    DB_POOL_RECYCLE: int = 3600

    # Create missing alert tables at startup (alembic remains the source of truth)
    AUTO_CREATE_TABLES: bool = True

    WEB_PORT: int = 8080
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["GET", "POST"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CONTENT_SECURITY_POLICY: str = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        "connect-src 'self'"
    )
    MAX_ALERT_BODY_BYTES: int = 1024 * 1024
    INGEST_RATE_LIMIT: str = "600/minute"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1
    SENTRY_PROFILES_SAMPLE_RATE: float = 0.0
    SENTRY_RELEASE: str | None = None

    @field_validator("DB_PORT", mode="before")
    @classmethod
    def coerce_port_to_str(cls, v):
        """Accept the DB port as int or str."""
        if v is None:
            return v
        return str(v)

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        if self.DATABASE_URL:
            return self
        if not self.DB_NAME:
            raise ValueError("MONITOR_WEB_DB_NAME is required")
        if not self.DB_USER:
            raise ValueError("MONITOR_WEB_DB_USER is required")
        return self

    @property
    def database_url(self) -> str:
        """Effective SQLAlchemy URL (explicit DATABASE_URL or one built from DB_* parts)."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASS)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str | None = "sqlite:///./storage/dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str | None = "sqlite:///:memory:"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    DATABASE_URL: str | None = None
    LOG_FORMAT: str = "json"
    AUTO_CREATE_TABLES: bool = False


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
