# doc_paginate/config.py
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./documents.db"
    DATABASE_ECHO: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


class PaginationSettings(BaseSettings):
    DEFAULT_LIMIT: int = 10
    LEAN_WITH_ID: bool = True

    # Upper bound for the ?limit= query parameter only
    MAX_LIMIT: int = 100

    @field_validator("MAX_LIMIT")
    def validate_max_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("PAGINATE_MAX_LIMIT must be at least 1")
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PAGINATE_", extra="ignore"
    )


pagination_settings = PaginationSettings()
