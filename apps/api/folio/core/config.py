"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None
    slug_fallback: str = Field(default="n-a", min_length=1, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    slug_conflict_retries: int = Field(default=3, ge=0)
    tag_conflict_retries: int = Field(default=1, ge=0)

    model_config = SettingsConfigDict(env_prefix="FOLIO_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
