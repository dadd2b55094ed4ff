from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(..., alias="DATABASE_URL")

    cors_origins: str | None = Field(None, alias="CORS_ORIGINS")

    # --- Number generation ---
    # Off: uniqueness rests on the sequence counters alone.
    # Over HTTP the check needs a lookup passed to create_app(number_lookup=...);
    # without one every generated number counts as new.
    numbering_duplicate_check: bool = Field(False, alias="NUMBERING_DUPLICATE_CHECK")
    numbering_duplicate_max_attempts: int = Field(10, ge=1, alias="NUMBERING_DUPLICATE_MAX_ATTEMPTS")
    numbering_generation_timeout_seconds: float | None = Field(
        None,
        gt=0,
        alias="NUMBERING_GENERATION_TIMEOUT_SECONDS",
    )

    # --- Seeds ---
    numbering_seed_file: Path | None = Field(None, alias="NUMBERING_SEED_FILE")

    @field_validator("cors_origins", "numbering_seed_file", "numbering_generation_timeout_seconds", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
