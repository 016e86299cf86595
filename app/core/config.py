# app/core/config.py
from __future__ import annotations
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",        # игнорим лишние ключи из .env
        case_sensitive=False,  # нечувствительно к регистру
    )

    # --- базовые ---
    APP_NAME: str = "warehouse-hierarchy"
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["*"]  # pydantic распарсит '["*"]' из .env

    # --- БД ---
    DB_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL", "SQLALCHEMY_DATABASE_URI", "DB_DSN"),
    )
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 40
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_RECYCLE: int = 1800  # 30 минут

    # совместимость
    @property
    def DATABASE_URL(self) -> Optional[str]:
        return self.DB_URL

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> Optional[str]:
        return self.DB_URL

    # --- Redis (шина для пересчёта денормализованных полей) ---
    USE_REDIS: bool = True
    REDIS_DSN: str = "redis://redis:6379/0"
    PROPAGATION_CHANNEL: str = "warehouse:propagation"

    # --- Keycloak (делаем опциональными, чтобы не валиться, если чего-то нет) ---
    KEYCLOAK_URL: Optional[str] = None
    KEYCLOAK_REALM: Optional[str] = None
    KEYCLOAK_CLIENT_ID: Optional[str] = None
    KEYCLOAK_CLIENT_SECRET: Optional[str] = None

    # --- тенанты ---
    SUPER_ADMIN_ID: Optional[str] = None

    # --- лимиты ---
    LIST_LIMIT_DEFAULT: int = 50
    LIST_LIMIT_MAX: int = 100
    PUT_AWAY_MAX_UPCS: int = 500

    # --- логирование ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

settings = Settings()
