"""
Configuration settings for the AKIBEKS data-access layer.

Uses Pydantic Settings to load environment variables for the PostgreSQL
connection, backend selection, query strictness and logging.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BackendMode = Literal["auto", "postgres", "mock"]


class Settings(BaseSettings):
    # Database
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")
    db_host: Optional[str] = Field(None, alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("password", alias="DB_PASSWORD")
    db_name: str = Field("akibeks_db", alias="DB_NAME")
    db_pool_min: int = Field(1, alias="DB_POOL_MIN")
    db_pool_max: int = Field(10, alias="DB_POOL_MAX")
    db_connect_timeout: float = Field(10.0, alias="DB_CONNECT_TIMEOUT")

    # Data access
    data_backend: BackendMode = Field("auto", alias="DATA_BACKEND")
    strict_filters: bool = Field(False, alias="STRICT_FILTERS")
    seed_mock_data: bool = Field(True, alias="SEED_MOCK_DATA")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_configured(self) -> bool:
        """Whether enough connection details exist to attempt a real backend."""
        return bool(self.database_url or self.db_host)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["BackendMode", "Settings", "get_settings"]
