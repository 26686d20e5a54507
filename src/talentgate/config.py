from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "TalentGate"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/talentgate.db"
    data_dir: Path = Path("./data")
    upload_dir: Path = Path("./data/uploads")
    draft_dir: Path = Path("./data/drafts")

    public_app_url: str = "http://localhost:8000"
    cors_origins: str = "http://localhost:3000"
    staff_header: str = "X-Staff-User"

    public_token_bytes: int = 32
    public_token_max_attempts: int = 5

    admin_filter_strategy: str = "exists"
    admin_overfetch_factor: int = 3
    admin_count_ceiling: int = 10000

    resume_max_bytes: int = 10 * 1024 * 1024
    portfolio_max_bytes: int = 50 * 1024 * 1024

    draft_storage_key: str = "application-form-data"
    draft_max_bytes: int = 5 * 1024 * 1024

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("admin_filter_strategy")
    @classmethod
    def validate_filter_strategy(cls, value: str) -> str:
        allowed = {"exists", "two_phase"}
        if value not in allowed:
            raise ValueError(f"admin_filter_strategy must be one of {sorted(allowed)}")
        return value

    @field_validator("public_token_max_attempts", "admin_overfetch_factor")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be at least 1")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def public_origin(self) -> str:
        return self.public_app_url.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
