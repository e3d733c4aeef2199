from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Hireform"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 5000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/hireform.db"
    database_echo: bool = False
    data_dir: Path = Path("./data")
    upload_dir: Path = Path("./data/uploads")
    max_upload_mb: int = 5

    cors_origins: str = "http://localhost:3000,http://localhost:3001"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        # Hosted PostgreSQL providers still hand out the legacy "postgres://" scheme.
        if value.startswith("postgres://"):
            return "postgresql://" + value.removeprefix("postgres://")
        return value

    @field_validator("max_upload_mb")
    @classmethod
    def validate_max_upload(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_upload_mb must be positive")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
