from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Local development can use a .env file next to the project root.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: Literal["dev", "staging", "prod"] = Field(default="dev")

    # Generative-language service (OpenAI-compatible endpoint)
    ai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "AI_API_KEY"),
    )
    ai_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        validation_alias=AliasChoices("AI_BASE_URL"),
    )
    ai_model: str = Field(
        default="gemini-2.0-flash",
        validation_alias=AliasChoices("AI_MODEL"),
    )
    ai_timeout_seconds: float = Field(default=30.0, validation_alias=AliasChoices("AI_TIMEOUT_SECONDS"))
    ai_max_retries: int = Field(default=1, ge=0, validation_alias=AliasChoices("AI_MAX_RETRIES"))
    ai_prompt_record_limit: int = Field(default=20, ge=1, validation_alias=AliasChoices("AI_PROMPT_RECORD_LIMIT"))

    # Search
    search_result_limit: int = Field(default=20, ge=1, validation_alias=AliasChoices("SEARCH_RESULT_LIMIT"))
    instant_search_limit: int = Field(default=10, ge=1, validation_alias=AliasChoices("INSTANT_SEARCH_LIMIT"))

    # Data
    samples_dir: Path = Field(default=DEFAULT_SAMPLES_DIR, validation_alias=AliasChoices("SAMPLES_DIR"))

    # Application settings
    cors_allow_origins: str = Field(default="*", validation_alias=AliasChoices("CORS_ALLOW_ORIGINS"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    port: int = Field(default=8080, validation_alias=AliasChoices("PORT"))


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return cached application settings."""
    return AppSettings()
