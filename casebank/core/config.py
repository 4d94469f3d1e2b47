from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = "dev"
    app_name: str = "Casebank Restore API"
    api_prefix: str = "/api/v1"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "casebank"
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_sslmode: Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"] = "disable"
    redis_url: str = "redis://localhost:6379/0"

    default_category_name: str = Field(default="Imported cases", min_length=1, max_length=255)
    restore_include_user_data: bool = False
    restore_same_site_users: bool = False
    staged_file_ttl_hours: int = Field(default=24, ge=1)

    @property
    def async_database_url(self) -> str:
        if self.database_url:
            if self.database_url.startswith("postgresql+asyncpg://"):
                return self.database_url
            if self.database_url.startswith("postgresql://"):
                return "postgresql+asyncpg://" + self.database_url.removeprefix("postgresql://")
            return self.database_url
        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)
        ssl_query = ""
        if self.db_sslmode == "require":
            ssl_query = "?ssl=require"
        return (
            f"postgresql+asyncpg://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"
            f"{ssl_query}"
        )

    @property
    def sync_database_url(self) -> str:
        url = self.async_database_url
        if url.startswith("postgresql+asyncpg://"):
            converted = "postgresql+psycopg2://" + url.removeprefix("postgresql+asyncpg://")
        else:
            converted = url
        return converted.replace("ssl=require", "sslmode=require")


@lru_cache
def get_settings() -> Settings:
    return Settings()
