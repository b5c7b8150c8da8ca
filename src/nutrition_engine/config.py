"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-4.1-mini"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    synthesis_timeout_seconds: float = Field(default=20.0, gt=0)
    negligible_calories: float = Field(default=100.0, ge=0)
    negligible_protein: float = Field(default=10.0, ge=0)
    negligible_carbs: float = Field(default=10.0, ge=0)
    negligible_fat: float = Field(default=5.0, ge=0)
    negligible_fiber: float = Field(default=5.0, ge=0)
    tolerance_over: float = Field(default=0.10, ge=0)
    tolerance_under: float = Field(default=0.05, ge=0, le=1)
    max_suggested_recipes: int = Field(default=3, ge=1)
    max_candidate_recipes: int = Field(default=40, ge=1)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
