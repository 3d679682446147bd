"""
Environment-driven settings for the quiz service.

Values come from the process environment and `.env` via pydantic-settings.
A missing MONGO_URI is allowed: the app still starts, but the readiness gate
keeps /api/* answering 503.
"""
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ORIGINS = [
    "https://nptel-tau.vercel.app",
    "https://nptel-tau.vercel.app/",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True,
    )

    mongo_uri: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("MONGO_URI", "MONGODB_URI"),
    )
    mongo_db_name: str = "quizapp"
    mongo_timeout_ms: int = 5000

    host: str = "0.0.0.0"
    port: int = 5000

    # Comma-separated in the environment
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_ORIGINS),
    )

    # When False, client-supplied scores are ignored and every submission is graded here
    trust_client_score: bool = True

    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("mongo_uri", mode="before")
    @classmethod
    def blank_uri_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
