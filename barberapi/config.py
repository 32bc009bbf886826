"""Application configuration."""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Base settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file="barberapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Application
    APP_NAME: str = "Barbershop Member API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Database
    DATABASE_URL: str = "sqlite:///./barberapi.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Operator identity
    STAFF_API_TOKEN: Optional[str] = None
    ADMIN_API_TOKEN: Optional[str] = None
    DEFAULT_OPERATOR_NAME: str = "店员"

    # Business rules
    STORE_TIMEZONE: str = "Asia/Shanghai"
    MEMBER_NO_PREFIX: str = "M"
    LEDGER_MAX_RETRIES: int = 3  # optimistic-concurrency attempts per workflow

    # Pagination
    DEFAULT_PAGE_SIZE: int = 15
    MAX_PAGE_SIZE: int = 100

    @property
    def auth_enabled(self) -> bool:
        return bool(self.STAFF_API_TOKEN or self.ADMIN_API_TOKEN)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


class DevelopmentSettings(Settings):
    DEBUG: bool = True


class StagingSettings(Settings):
    DEBUG: bool = False


class ProductionSettings(Settings):
    DEBUG: bool = False

    @model_validator(mode="after")
    def require_operator_token(self) -> "ProductionSettings":
        if not self.auth_enabled:
            raise ValueError("STAFF_API_TOKEN or ADMIN_API_TOKEN must be set in production")
        return self


ENVIRONMENTS: dict[str, type[Settings]] = {
    "development": DevelopmentSettings,
    "staging": StagingSettings,
    "production": ProductionSettings,
}


@lru_cache
def get_settings() -> Settings:
    """Return settings instance based on ENVIRONMENT variable."""

    env = os.getenv("ENVIRONMENT", "development").lower()
    settings_cls = ENVIRONMENTS.get(env, DevelopmentSettings)
    return settings_cls()


settings = get_settings()
